# app/api/v1/endpoints/media.py
# Description: Upload endpoint for lore media plus attach/detach of media references on lore entries.
#
# Imports
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    status,
    UploadFile
)
from loguru import logger
#
# Local Imports
from lore_Server_API.app.core.Ingestion_Media_Processing.Upload_Sink import UploadSink
from lore_Server_API.app.core.Lore.Lore_Library import LoreLibrary
from lore_Server_API.app.api.v1.schemas.lore_schemas import DetailResponse, MediaAttachRequest
from lore_Server_API.app.schemas.lore_models import LoreEntry, MediaReference
from lore_Server_API.app.api.v1.API_Deps.Lore_DB_Deps import get_lore_library, get_upload_sink
from lore_Server_API.app.api.v1.endpoints.lore import handle_lore_errors
#
#######################################################################################################################

router = APIRouter()


@router.post(
    "/upload",
    response_model=MediaReference,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a single media file",
    tags=["Media"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": DetailResponse},
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": DetailResponse},
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: {"model": DetailResponse},
    }
)
async def upload_media(
        file: Optional[UploadFile] = File(None, description="The media file to store"),
        sink: UploadSink = Depends(get_upload_sink)
):
    try:
        logger.info(f"Receiving upload: filename='{file.filename if file else None}', "
                    f"content_type='{file.content_type if file else None}'")
        return await sink.save_upload(file)
    except Exception as e:
        handle_lore_errors(e, "upload")


@router.post(
    "/lore/{entry_id}/media",
    response_model=LoreEntry,
    summary="Attach an uploaded media reference to a lore entry",
    tags=["Media"],
    responses={status.HTTP_404_NOT_FOUND: {"model": DetailResponse}}
)
async def attach_media(
        entry_id: str,
        media_in: MediaAttachRequest,
        library: LoreLibrary = Depends(get_lore_library)
):
    try:
        return library.attach_media(entry_id, media_in.to_reference())
    except Exception as e:
        handle_lore_errors(e, "media attachment")


@router.delete(
    "/lore/{entry_id}/media/{filename}",
    response_model=LoreEntry,
    summary="Detach a media reference from a lore entry",
    tags=["Media"],
    responses={status.HTTP_404_NOT_FOUND: {"model": DetailResponse}}
)
async def detach_media(
        entry_id: str,
        filename: str,
        library: LoreLibrary = Depends(get_lore_library)
):
    try:
        return library.detach_media(entry_id, filename)
    except Exception as e:
        handle_lore_errors(e, "media attachment")

#
# End of media.py
#######################################################################################################################
