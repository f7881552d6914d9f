# config.py
# Description: Configuration settings for the lore server application.
#
# Imports
import os
from pathlib import Path
from typing import Any, Dict, List
#
# 3rd-party Libraries
from loguru import logger
#
# Local Imports
#
########################################################################################################################
#
# Functions:

# --- Constants ---
DEFAULT_PORT = 3000
UPLOADS_URL_PREFIX = "/uploads"

# --- Upload Settings ---
MAX_UPLOAD_SIZE_BYTES = 20 * 1024 * 1024  # 20 MiB per file
ALLOWED_UPLOAD_MIMETYPES = (
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/m4a",
    "audio/mp4",
    "audio/ogg",
)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings() -> Dict[str, Any]:
    """Loads all settings from environment variables or defaults into a dictionary."""

    # --- Storage ---
    data_dir = Path(os.getenv("LORE_DATA_DIR", "./lore_data/")).expanduser()
    data_file = Path(os.getenv("LORE_DATA_FILE", str(data_dir / "lore.json"))).expanduser()
    uploads_dir = Path(os.getenv("LORE_UPLOADS_DIR", str(data_dir / "uploads"))).expanduser()

    # --- Server binding ---
    host = os.getenv("LORE_HOST", "127.0.0.1")
    try:
        port = int(os.getenv("LORE_PORT", str(DEFAULT_PORT)))
    except ValueError:
        logger.warning(f"LORE_PORT is not an integer, falling back to {DEFAULT_PORT}")
        port = DEFAULT_PORT

    # --- Logging ---
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    config_dict = {
        # Storage
        "DATA_DIR": data_dir,
        "DATA_FILE": data_file,
        "UPLOADS_DIR": uploads_dir,
        "CASCADE_DELETE_MEDIA": _env_flag("LORE_CASCADE_DELETE_MEDIA"),

        # Server
        "HOST": host,
        "PORT": port,
        "ALLOWED_ORIGINS": _env_list("ALLOWED_ORIGINS"),
        "LOG_LEVEL": log_level,

        # Uploads
        "MAX_UPLOAD_SIZE_BYTES": MAX_UPLOAD_SIZE_BYTES,
        "ALLOWED_UPLOAD_MIMETYPES": ALLOWED_UPLOAD_MIMETYPES,
        "UPLOADS_URL_PREFIX": UPLOADS_URL_PREFIX,
    }

    # Create necessary directories if they don't exist
    config_dict["DATA_FILE"].parent.mkdir(parents=True, exist_ok=True)
    config_dict["UPLOADS_DIR"].mkdir(parents=True, exist_ok=True)

    return config_dict


# --- Global Settings Object ---
# Load the settings when the module is imported
settings = load_settings()

ALLOWED_ORIGINS = settings["ALLOWED_ORIGINS"]

#
# End of config.py
########################################################################################################################
