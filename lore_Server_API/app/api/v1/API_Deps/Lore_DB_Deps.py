# lore_Server_API/app/api/v1/API_Deps/Lore_DB_Deps.py
import threading
from typing import Optional

from fastapi import HTTPException, status
from loguru import logger
#
# Local Imports
from lore_Server_API.app.core.config import settings
from lore_Server_API.app.core.DB_Management.Lore_DB import LoreDB, LoreDBError
from lore_Server_API.app.core.Ingestion_Media_Processing.Upload_Sink import UploadSink
from lore_Server_API.app.core.Lore.Lore_Library import LoreLibrary
#
#######################################################################################################################

# --- Process-wide instances, created on first use ---
_upload_sink_instance: Optional[UploadSink] = None
_lore_library_instance: Optional[LoreLibrary] = None
_instances_lock = threading.Lock()


def get_upload_sink() -> UploadSink:
    global _upload_sink_instance
    with _instances_lock:
        if _upload_sink_instance is None:
            _upload_sink_instance = UploadSink(
                uploads_dir=settings["UPLOADS_DIR"],
                max_size_bytes=settings["MAX_UPLOAD_SIZE_BYTES"],
                allowed_mimetypes=settings["ALLOWED_UPLOAD_MIMETYPES"],
                url_prefix=settings["UPLOADS_URL_PREFIX"],
            )
            logger.info(f"Upload sink ready at {settings['UPLOADS_DIR']}")
        return _upload_sink_instance


def get_lore_library() -> LoreLibrary:
    global _lore_library_instance
    sink = get_upload_sink()
    with _instances_lock:
        if _lore_library_instance is None:
            try:
                db = LoreDB(settings["DATA_FILE"])
            except LoreDBError as e:
                logger.error(f"Failed to initialize lore storage: {e}", exc_info=True)
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                                    detail="Lore storage is unavailable.")
            _lore_library_instance = LoreLibrary(
                db,
                upload_sink=sink,
                cascade_delete_media=settings["CASCADE_DELETE_MEDIA"],
            )
        return _lore_library_instance

#
# End of Lore_DB_Deps.py
#######################################################################################################################
