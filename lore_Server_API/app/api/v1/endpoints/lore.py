# app/api/v1/endpoints/lore.py
from typing import List

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    status,
)
from loguru import logger

# Local Imports
from lore_Server_API.app.core.DB_Management.Lore_DB import LoreDBError
from lore_Server_API.app.core.Ingestion_Media_Processing.Upload_Sink import (
    FileValidationError, MissingUploadError, PayloadTooLargeError, UnsupportedMediaTypeError
)
from lore_Server_API.app.core.Lore.Lore_Library import (
    EntryNotFoundError, LoreLibrary, MediaNotFoundError
)
from lore_Server_API.app.api.v1.schemas.lore_schemas import (
    DeleteResponse, DetailResponse, LoreEntryCreate, LoreEntryUpdate
)
from lore_Server_API.app.schemas.lore_models import LoreEntry
from lore_Server_API.app.api.v1.API_Deps.Lore_DB_Deps import get_lore_library

router = APIRouter()


# --- Helper for Exception Handling ---
def handle_lore_errors(e: Exception, entity_type: str = "resource"):
    if isinstance(e, HTTPException):
        raise e
    elif isinstance(e, (EntryNotFoundError, MediaNotFoundError)):
        logger.warning(f"Not found while handling {entity_type}: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, UnsupportedMediaTypeError):
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e))
    elif isinstance(e, PayloadTooLargeError):
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    elif isinstance(e, (MissingUploadError, FileValidationError)):
        logger.warning(f"Rejected {entity_type}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, LoreDBError):
        logger.error(f"Storage error for {entity_type}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail=f"A storage error occurred while processing your request for {entity_type}.")
    elif isinstance(e, ValueError):
        logger.warning(f"Value error for {entity_type}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    else:
        logger.error(f"Unexpected error for {entity_type}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail=f"An unexpected error occurred while processing your request for {entity_type}.")


# --- Lore Entry Endpoints ---
@router.get(
    "",
    response_model=List[LoreEntry],
    summary="List all lore entries in storage order",
    tags=["Lore"]
)
async def list_entries(library: LoreLibrary = Depends(get_lore_library)):
    try:
        entries = library.list_entries()
        logger.debug(f"Listing {len(entries)} lore entries")
        return entries
    except Exception as e:
        handle_lore_errors(e, "lore list")


@router.post(
    "",
    response_model=LoreEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new lore entry",
    tags=["Lore"]
)
async def create_entry(entry_in: LoreEntryCreate, library: LoreLibrary = Depends(get_lore_library)):
    try:
        return library.create_entry(
            title=entry_in.title,
            type=entry_in.type,
            tags=entry_in.tags,
            body=entry_in.body,
        )
    except Exception as e:
        handle_lore_errors(e, "lore entry")


@router.put(
    "/{entry_id}",
    response_model=LoreEntry,
    summary="Update the text fields of a lore entry",
    tags=["Lore"],
    responses={status.HTTP_404_NOT_FOUND: {"model": DetailResponse}}
)
async def update_entry(entry_id: str, entry_in: LoreEntryUpdate,
                       library: LoreLibrary = Depends(get_lore_library)):
    update_data = entry_in.model_dump(exclude_unset=True)
    try:
        logger.info(f"Updating lore entry '{entry_id}', DataKeys={list(update_data.keys())}")
        return library.update_entry(entry_id, update_data)
    except Exception as e:
        handle_lore_errors(e, "lore entry")


@router.delete(
    "/{entry_id}",
    response_model=DeleteResponse,
    summary="Delete a lore entry",
    tags=["Lore"],
    responses={status.HTTP_404_NOT_FOUND: {"model": DetailResponse}}
)
async def delete_entry(entry_id: str, library: LoreLibrary = Depends(get_lore_library)):
    try:
        library.delete_entry(entry_id)
        return DeleteResponse(ok=True)
    except Exception as e:
        handle_lore_errors(e, "lore entry")

#
# End of lore.py
#######################################################################################################################
