# run.py
# Description: Entry point for the lore-cli application. Sets up logging, ensures the config file exists and runs the app.
#
# Imports
import logging
import logging.handlers
#
# 3rd-party Libraries
#
# Local Imports
from .app import LoreCli
from .config import DEFAULT_CONFIG, get_config_path, get_log_file_path, get_setting, load_config
#
#######################################################################################################################
#
# Functions:

log = logging.getLogger(__name__)


def setup_logging() -> None:
    """Logs go to a rotating file; the terminal belongs to Textual."""
    log_path = get_log_file_path()
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=int(get_setting("logging", "log_max_bytes", DEFAULT_CONFIG["logging"]["log_max_bytes"])),
        backupCount=int(get_setting("logging", "log_backup_count", DEFAULT_CONFIG["logging"]["log_backup_count"])),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(
        "{asctime} [{levelname:<8}] {name}:{lineno:<4} : {message}",
        style="{", datefmt="%Y-%m-%d %H:%M:%S"
    ))
    root = logging.getLogger()
    root.setLevel(get_setting("logging", "file_log_level", "INFO"))
    root.addHandler(handler)
    log.info(f"File logging to {log_path}")


def main() -> None:
    load_config(get_config_path())
    setup_logging()
    log.info("Starting lore-cli application...")
    app = LoreCli()
    app.run()
    log.info("lore-cli application finished.")


if __name__ == "__main__":
    main()

#
# End of run.py
#######################################################################################################################
