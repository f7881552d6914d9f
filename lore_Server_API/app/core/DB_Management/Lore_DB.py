# Lore_DB.py
# Description: Flat JSON document store for lore entries. The whole collection is the unit of persistence:
#   every read loads the full document and every write replaces it.
#
# Imports
import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Union
#
# Third-Party Libraries
from loguru import logger
from pydantic import ValidationError
#
# Local Imports
from lore_Server_API.app.schemas.lore_models import LoreEntry, now_ms
#
########################################################################################################################
#
# Functions:


# --- Custom Exceptions ---
class LoreDBError(Exception):
    """Base exception for LoreDB related errors."""
    pass


class StorageError(LoreDBError):
    """Raised when the persisted document cannot be written."""

    def __init__(self, message="Failed to write lore document.", path: Union[str, Path, None] = None):
        super().__init__(message)
        self.path = path


# --- Store Class ---
class LoreDB:
    """
    Reads and writes the entire entry collection as a single JSON array.

    A missing, unreadable or corrupt document loads as an empty collection; a corrupt one is moved
    aside first so the next save does not destroy it. Individual entries that fail validation are
    skipped and the document is copied aside once per version. Writes go through a temp file in the same
    directory followed by os.replace, so readers never observe a half-written document.
    """

    def __init__(self, data_file: Union[str, Path]):
        self.data_file = Path(data_file)
        self._backed_up_version: Optional[int] = None
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Could not create directory for lore document {self.data_file}: {e}")
            raise LoreDBError(f"Could not initialize lore storage at {self.data_file.parent}") from e
        logger.debug(f"LoreDB initialized with document: {self.data_file}")

    def load_all(self) -> List[LoreEntry]:
        if not self.data_file.exists():
            logger.info(f"Lore document {self.data_file} does not exist yet, starting with an empty collection.")
            return []

        try:
            raw = self.data_file.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Error reading lore document {self.data_file}: {e}")
            return []

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        except ValueError as e:
            logger.error(f"Lore document {self.data_file} is corrupt, treating it as empty: {e}")
            self._quarantine_corrupt_document()
            return []

        entries: List[LoreEntry] = []
        rejected = 0
        for position, item in enumerate(data):
            try:
                entries.append(LoreEntry.model_validate(item))
            except ValidationError as e:
                rejected += 1
                logger.error(f"Skipping invalid lore entry #{position} in {self.data_file}: {e}")
        if rejected:
            logger.warning(f"{rejected} of {len(data)} lore entries in {self.data_file} were invalid")
            self._backup_document()

        logger.debug(f"Loaded {len(entries)} lore entries from {self.data_file}")
        return entries

    def save_all(self, entries: Sequence[LoreEntry]) -> None:
        payload = json.dumps([entry.to_document() for entry in entries], indent=2, ensure_ascii=False)
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.data_file.parent,
                prefix=f".{self.data_file.name}.", suffix=".tmp", delete=False
            ) as fh:
                tmp_path = Path(fh.name)
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.data_file)
        except OSError as e:
            logger.error(f"Failed to write lore document {self.data_file}: {e}")
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write lore document: {e.strerror or e}", path=self.data_file) from e
        logger.debug(f"Saved {len(entries)} lore entries to {self.data_file}")

    def _corrupt_backup_path(self) -> Path:
        return self.data_file.with_name(f"{self.data_file.name}.corrupt-{now_ms()}")

    def _backup_document(self) -> None:
        """Copies the document aside, keeping it in place; used when only some entries were rejected."""
        backup = self._corrupt_backup_path()
        try:
            version = self.data_file.stat().st_mtime_ns
            if version == self._backed_up_version:
                return
            shutil.copy2(self.data_file, backup)
            self._backed_up_version = version
            logger.warning(f"Copied lore document with invalid entries to {backup}")
        except OSError as e:
            logger.error(f"Could not back up lore document {self.data_file}: {e}")

    def _quarantine_corrupt_document(self) -> None:
        backup = self._corrupt_backup_path()
        try:
            os.replace(self.data_file, backup)
            logger.warning(f"Moved corrupt lore document to {backup}")
        except OSError as e:
            logger.error(f"Could not move corrupt lore document {self.data_file} aside: {e}")

#
# End of Lore_DB.py
########################################################################################################################
