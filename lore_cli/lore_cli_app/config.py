# lore_cli/config.py
# Description: Configuration management for the lore_cli application.
#
# Imports
import tomllib
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
#
# Third-Party Imports
import toml
#
# Local Imports
#
#######################################################################################################################
#
# Functions:

log = logging.getLogger(__name__)

THEME_DARK = "dark"
THEME_LIGHT = "light"

# --- Default Configuration ---
DEFAULT_CONFIG = {
    "server": {
        "url": "http://127.0.0.1:3000",
        "timeout": 30.0,
    },
    "appearance": {
        "theme": THEME_DARK,
    },
    "logging": {
        "log_filename": "lore_cli_app.log",
        "file_log_level": "INFO",
        "log_max_bytes": 5 * 1024 * 1024,  # 5 MB
        "log_backup_count": 3,
    },
}


def get_config_path() -> Path:
    """Determines the path to the configuration file."""
    # Priority: Environment variable > Default user location
    env_path = os.environ.get("LORE_CLI_CONFIG_PATH")
    if env_path:
        path = Path(env_path).expanduser().resolve()
        log.debug(f"Using config path from LORE_CLI_CONFIG_PATH: {path}")
        return path
    return Path.home() / ".config" / "lore_cli" / "config.toml"


def _default_copy() -> Dict[str, Any]:
    return {k: v.copy() if isinstance(v, dict) else v for k, v in DEFAULT_CONFIG.items()}


# Store loaded config globally within this module after first load
_APP_CONFIG: Optional[Dict[str, Any]] = None
_APP_CONFIG_PATH: Optional[Path] = None


def load_config(config_path: Optional[Path] = None, reload: bool = False) -> Dict[str, Any]:
    """
    Loads configuration from TOML file, merges with defaults.
    Creates a default config file if none exists. Caches the loaded configuration.
    """
    global _APP_CONFIG, _APP_CONFIG_PATH
    if config_path is None:
        config_path = get_config_path()
    if _APP_CONFIG is not None and not reload and _APP_CONFIG_PATH == config_path:
        return _APP_CONFIG

    config = _default_copy()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        if config_path.exists():
            try:
                with open(config_path, "rb") as f:
                    user_config = tomllib.load(f)
                # Merge user config into defaults (simple one-level deep merge)
                for section, section_config in user_config.items():
                    if section in config and isinstance(config[section], dict):
                        if isinstance(section_config, dict):
                            config[section].update(section_config)
                        else:
                            log.warning(f"Ignoring [{section}] in {config_path}: expected a table, "
                                        f"got {type(section_config).__name__}")
                    else:
                        config[section] = section_config
                log.info(f"Loaded configuration from {config_path}")
            except tomllib.TOMLDecodeError as e:
                log.error(f"Error decoding TOML file {config_path}: {e}", exc_info=True)
                log.warning("Using default configuration values due to TOML error.")
        else:
            log.warning(f"Config file not found at {config_path}. Creating default config.")
            with open(config_path, "w", encoding="utf-8") as f:
                toml.dump(DEFAULT_CONFIG, f)
    except OSError as e:
        log.error(f"OS error accessing config file {config_path}: {e}", exc_info=True)
        log.warning("Using default configuration values due to OS error.")

    _APP_CONFIG = config
    _APP_CONFIG_PATH = config_path
    return _APP_CONFIG


def get_setting(section: str, key: str, default: Any = None) -> Any:
    """Gets a specific setting, returning a default if not found."""
    section_config = load_config().get(section)
    if not isinstance(section_config, dict):
        return default
    return section_config.get(key, default)


def set_setting(section: str, key: str, value: Any, config_path: Optional[Path] = None) -> None:
    """Updates one setting in memory and writes the whole configuration back to disk."""
    if config_path is None:
        config_path = _APP_CONFIG_PATH or get_config_path()
    config = load_config(config_path)
    if not isinstance(config.get(section), dict):
        config[section] = {}
    config[section][key] = value
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        log.debug(f"Saved setting [{section}] {key}={value!r} to {config_path}")
    except OSError as e:
        log.error(f"Failed to save setting [{section}] {key} to {config_path}: {e}", exc_info=True)


def get_theme_preference() -> str:
    theme = get_setting("appearance", "theme", THEME_DARK)
    return THEME_LIGHT if theme == THEME_LIGHT else THEME_DARK


def save_theme_preference(theme: str) -> None:
    set_setting("appearance", "theme", THEME_LIGHT if theme == THEME_LIGHT else THEME_DARK)


def get_log_file_path() -> Path:
    """Gets the full path for the client log file."""
    log_dir = Path.home() / ".local" / "share" / "lore_cli"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / get_setting("logging", "log_filename", DEFAULT_CONFIG["logging"]["log_filename"])

#
# End of lore_cli/config.py
#######################################################################################################################
