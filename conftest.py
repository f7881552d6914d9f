# conftest.py
# Description: Points server and client storage at throwaway locations before any test module imports settings.
#
import os
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="lore_pytest_"))

os.environ.setdefault("LORE_DATA_DIR", str(_TEST_ROOT / "server_data"))
os.environ.setdefault("LORE_CLI_CONFIG_PATH", str(_TEST_ROOT / "cli" / "config.toml"))
os.environ.setdefault("LOG_LEVEL", "DEBUG")
