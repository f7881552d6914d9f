# Lore_Library.py
# Description: Entry and media-attachment operations over the lore document store.
#   Each operation is a single load-modify-save cycle of the whole collection, serialized by a process-wide lock.
#
# Imports
import threading
from typing import Any, Dict, List, Optional, Tuple
#
# Third-party Libraries
from loguru import logger
#
# Local Imports
from lore_Server_API.app.core.DB_Management.Lore_DB import LoreDB
from lore_Server_API.app.core.Ingestion_Media_Processing.Upload_Sink import FileValidationError, UploadSink
from lore_Server_API.app.schemas.lore_models import (
    DEFAULT_ENTRY_TITLE,
    LoreEntry,
    MediaReference,
    clean_tags,
)
#
########################################################################################################################
#
# Functions:

UPDATABLE_FIELDS = ("title", "type", "tags", "body")


# --- Custom Exceptions ---
class LoreLibraryError(Exception):
    """Base exception for lore entry operations."""
    pass


class EntryNotFoundError(LoreLibraryError):
    def __init__(self, entry_id: str):
        super().__init__("Lore entry not found")
        self.entry_id = entry_id


class MediaNotFoundError(LoreLibraryError):
    def __init__(self, entry_id: str, filename: str):
        super().__init__("Media not found on entry")
        self.entry_id = entry_id
        self.filename = filename


def _clean_title(title: Optional[str]) -> str:
    return (title or "").strip() or DEFAULT_ENTRY_TITLE


def _find_entry(entries: List[LoreEntry], entry_id: str) -> Tuple[int, LoreEntry]:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index, entry
    raise EntryNotFoundError(entry_id)


class LoreLibrary:
    """
    CRUD over lore entries plus attach/detach of media references.

    When cascade_delete_media is enabled and an upload sink is available, deleting an entry also removes
    the blobs it referenced that no remaining entry still references.
    """

    def __init__(self, db: LoreDB, upload_sink: Optional[UploadSink] = None, cascade_delete_media: bool = False):
        self.db = db
        self.upload_sink = upload_sink
        self.cascade_delete_media = cascade_delete_media
        self._lock = threading.RLock()
        logger.info(f"LoreLibrary initialized (document: {db.data_file}, cascade_delete_media={cascade_delete_media})")

    # --- Entries ---
    def list_entries(self) -> List[LoreEntry]:
        return self.db.load_all()

    def get_entry(self, entry_id: str) -> LoreEntry:
        _, entry = _find_entry(self.db.load_all(), entry_id)
        return entry

    def create_entry(self, title: Optional[str] = None, type: Optional[str] = None,
                     tags: Optional[List[str]] = None, body: Optional[str] = None) -> LoreEntry:
        entry = LoreEntry(
            title=_clean_title(title),
            type=(type or "").strip(),
            tags=clean_tags(tags or []),
            body=(body or "").strip(),
        )
        with self._lock:
            entries = self.db.load_all()
            entries.append(entry)
            self.db.save_all(entries)
        logger.info(f"Created lore entry '{entry.id}' (title='{entry.title[:30]}')")
        return entry

    def update_entry(self, entry_id: str, update_data: Dict[str, Any]) -> LoreEntry:
        """
        Applies the provided fields onto an existing entry.

        Keys that are absent or None leave the field unchanged; an empty string or empty list clears it
        (a cleared title falls back to the default title).
        """
        unknown = set(update_data) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown fields for update: {', '.join(sorted(unknown))}")

        with self._lock:
            entries = self.db.load_all()
            index, entry = _find_entry(entries, entry_id)

            changes = {key: value for key, value in update_data.items() if value is not None}
            if "title" in changes:
                entry.title = _clean_title(changes["title"])
            if "type" in changes:
                entry.type = changes["type"].strip()
            if "tags" in changes:
                entry.tags = clean_tags(changes["tags"])
            if "body" in changes:
                entry.body = changes["body"].strip()
            entry.touch()

            entries[index] = entry
            self.db.save_all(entries)
        logger.info(f"Updated lore entry '{entry_id}', fields={sorted(changes)}")
        return entry

    def delete_entry(self, entry_id: str) -> LoreEntry:
        with self._lock:
            entries = self.db.load_all()
            index, removed = _find_entry(entries, entry_id)
            del entries[index]
            self.db.save_all(entries)

            if self.cascade_delete_media:
                self._delete_orphaned_blobs(removed, entries)
        logger.info(f"Deleted lore entry '{entry_id}'")
        return removed

    # --- Media ---
    def attach_media(self, entry_id: str, media: MediaReference) -> LoreEntry:
        with self._lock:
            entries = self.db.load_all()
            index, entry = _find_entry(entries, entry_id)
            entry.media.append(media)
            entry.touch()
            entries[index] = entry
            self.db.save_all(entries)
        logger.info(f"Attached media '{media.filename}' ({media.kind}) to lore entry '{entry_id}'")
        return entry

    def detach_media(self, entry_id: str, filename: str) -> LoreEntry:
        with self._lock:
            entries = self.db.load_all()
            index, entry = _find_entry(entries, entry_id)
            remaining = [ref for ref in entry.media if ref.filename != filename]
            if len(remaining) == len(entry.media):
                raise MediaNotFoundError(entry_id, filename)
            entry.media = remaining
            entry.touch()
            entries[index] = entry
            self.db.save_all(entries)
        logger.info(f"Detached media '{filename}' from lore entry '{entry_id}'")
        return entry

    def _delete_orphaned_blobs(self, removed: LoreEntry, remaining: List[LoreEntry]) -> None:
        if self.upload_sink is None:
            logger.warning("cascade_delete_media is enabled but no upload sink is configured; blobs kept")
            return
        still_referenced = {name for entry in remaining for name in entry.referenced_filenames()}
        for filename in removed.referenced_filenames():
            if filename in still_referenced:
                continue
            try:
                self.upload_sink.delete_blob(filename)
            except (OSError, FileValidationError) as e:
                logger.warning(f"Could not delete blob '{filename}' of deleted entry '{removed.id}': {e}")

#
# End of Lore_Library.py
########################################################################################################################
