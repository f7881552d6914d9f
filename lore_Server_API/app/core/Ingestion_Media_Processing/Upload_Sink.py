# Upload_Sink.py
# Description: Validates uploaded media (mimetype allow-list, size cap), stores the bytes in the uploads
#              directory under a generated collision-resistant name and builds the matching MediaReference.
#
import re
import time
from pathlib import Path
from typing import Iterable, List, Optional, Union
#
# 3rd-party Libraries
import aiofiles
from fastapi import UploadFile
from loguru import logger
#
# Local Imports
from lore_Server_API.app.core.config import (
    ALLOWED_UPLOAD_MIMETYPES,
    MAX_UPLOAD_SIZE_BYTES,
    UPLOADS_URL_PREFIX,
)
from lore_Server_API.app.schemas.lore_models import MediaReference, classify_media_kind
#
#######################################################################################################################
#
# Functions:


class FileValidationError(Exception):
    """Base exception for rejected uploads."""

    def __init__(self, message, issues: Optional[List[str]] = None):
        super().__init__(message)
        self.issues = issues if issues is not None else [message]


class UnsupportedMediaTypeError(FileValidationError):
    """The declared mimetype is not on the allow-list."""
    pass


class PayloadTooLargeError(FileValidationError):
    """The upload exceeds the configured size cap."""
    pass


class MissingUploadError(FileValidationError):
    """The request carried no file."""
    pass


_WHITESPACE_RUN = re.compile(r"\s+")
_UNSAFE_BASENAME_CHARS = re.compile(r"[^a-zA-Z0-9_\-]")
_UNSAFE_EXTENSION_CHARS = re.compile(r"[^a-zA-Z0-9]")
FALLBACK_BASENAME = "file"


def sanitize_upload_basename(stem: str) -> str:
    """
    Sanitizes the base name of an uploaded file by:
      1) Replacing runs of whitespace with a single underscore
      2) Removing every character that is not alphanumeric, '_' or '-'
    """
    sanitized = _WHITESPACE_RUN.sub("_", stem or "")
    sanitized = _UNSAFE_BASENAME_CHARS.sub("", sanitized)
    return sanitized or FALLBACK_BASENAME


def sanitize_extension(suffix: str) -> str:
    cleaned = _UNSAFE_EXTENSION_CHARS.sub("", (suffix or "").lstrip("."))
    return f".{cleaned}" if cleaned else ""


def normalize_mimetype(mimetype: Optional[str]) -> str:
    return (mimetype or "").split(";", 1)[0].strip().lower()


class UploadSink:
    """Disk-backed blob area for uploaded media."""

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, uploads_dir: Union[str, Path],
                 max_size_bytes: int = MAX_UPLOAD_SIZE_BYTES,
                 allowed_mimetypes: Iterable[str] = ALLOWED_UPLOAD_MIMETYPES,
                 url_prefix: str = UPLOADS_URL_PREFIX):
        self.uploads_dir = Path(uploads_dir)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.max_size_bytes = max_size_bytes
        self.allowed_mimetypes = {normalize_mimetype(m) for m in allowed_mimetypes}
        self.url_prefix = url_prefix.rstrip("/")

    # --- Validation ---
    def validate_mimetype(self, mimetype: Optional[str]) -> str:
        normalized = normalize_mimetype(mimetype)
        if normalized not in self.allowed_mimetypes:
            logger.warning(f"Rejected upload with unsupported mimetype '{mimetype}'")
            raise UnsupportedMediaTypeError(f"Unsupported file type: {mimetype or 'unknown'}")
        return normalized

    def check_size(self, size: Optional[int]) -> None:
        if size is not None and size > self.max_size_bytes:
            logger.warning(f"Rejected upload of {size} bytes (limit {self.max_size_bytes})")
            raise PayloadTooLargeError(
                f"File too large: limit is {self.max_size_bytes // (1024 * 1024)} MB"
            )

    # --- Naming ---
    def generate_filename(self, original_filename: str, timestamp: Optional[int] = None) -> str:
        """Builds '<sanitized base>_<epoch ms><ext>', adding a counter if that name is already taken."""
        original = Path(original_filename or "")
        base = sanitize_upload_basename(original.stem)
        ext = sanitize_extension(original.suffix)
        stamp = timestamp if timestamp is not None else int(time.time() * 1000)

        candidate = f"{base}_{stamp}{ext}"
        counter = 0
        while (self.uploads_dir / candidate).exists():
            counter += 1
            candidate = f"{base}_{stamp}_{counter}{ext}"
            if counter > 100:
                raise OSError(f"Could not generate unique filename for {original_filename} after {counter} attempts.")
        return candidate

    def blob_path(self, filename: str) -> Path:
        """Resolves a stored filename inside the uploads directory, refusing anything that escapes it."""
        if not filename or Path(filename).name != filename or filename in (".", ".."):
            raise FileValidationError(f"Invalid media filename: {filename!r}")
        return self.uploads_dir / filename

    def build_reference(self, filename: str, mimetype: str) -> MediaReference:
        return MediaReference(
            filename=filename,
            url=f"{self.url_prefix}/{filename}",
            mimetype=mimetype,
            kind=classify_media_kind(mimetype),
        )

    # --- Storage ---
    def store_blob(self, data: bytes, original_filename: str, mimetype: Optional[str]) -> MediaReference:
        """Validates and writes an in-memory upload. Returns the reference for the stored blob."""
        normalized = self.validate_mimetype(mimetype)
        self.check_size(len(data))
        filename = self.generate_filename(original_filename)
        local_path = self.uploads_dir / filename
        with open(local_path, "wb") as buffer:
            buffer.write(data)
        logger.info(f"Stored upload '{original_filename}' ({len(data)} bytes) as {local_path}")
        return self.build_reference(filename, normalized)

    async def save_upload(self, upload: Optional[UploadFile]) -> MediaReference:
        """Streams a multipart upload to disk, enforcing the size cap while writing."""
        if upload is None or not upload.filename:
            raise MissingUploadError("No file uploaded")

        local_path: Optional[Path] = None
        try:
            normalized = self.validate_mimetype(upload.content_type)
            self.check_size(getattr(upload, "size", None))

            filename = self.generate_filename(upload.filename)
            local_path = self.uploads_dir / filename
            written = 0
            async with aiofiles.open(local_path, "wb") as buffer:
                while True:
                    chunk = await upload.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    self.check_size(written)
                    await buffer.write(chunk)
            logger.info(f"Saved uploaded file '{upload.filename}' ({written} bytes) to {local_path}")
            return self.build_reference(filename, normalized)
        except Exception:
            if local_path is not None and local_path.exists():
                local_path.unlink(missing_ok=True)
                logger.debug(f"Cleaned up partially saved upload: {local_path}")
            raise
        finally:
            await upload.close()

    def delete_blob(self, filename: str) -> bool:
        path = self.blob_path(filename)
        if not path.exists():
            logger.debug(f"Blob {path} already absent, nothing to delete")
            return False
        path.unlink()
        logger.info(f"Deleted blob {path}")
        return True

#
# End of Upload_Sink.py
#######################################################################################################################
