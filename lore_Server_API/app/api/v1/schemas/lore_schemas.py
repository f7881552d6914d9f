# app/api/v1/schemas/lore_schemas.py
#
# Imports
from typing import List, Optional
# 3rd-party Libraries
from pydantic import BaseModel, Field, field_validator
#
# Local Imports
from lore_Server_API.app.schemas.lore_models import MediaKind, MediaReference, classify_media_kind
#
#######################################################################################################################
#
# Schemas:

# --- Entry Schemas ---
class LoreEntryCreate(BaseModel):
    title: Optional[str] = Field(None, description="Title; blank or missing becomes 'Untitled'")
    type: Optional[str] = Field(None, description="Free-text category label")
    tags: Optional[List[str]] = Field(None, description="Tags; trimmed, empty ones dropped")
    body: Optional[str] = Field(None, description="Free text body")

    model_config = {"extra": "forbid"}


class LoreEntryUpdate(BaseModel):
    # Only fields present in the request are applied (see model_dump(exclude_unset=True) in the endpoint).
    title: Optional[str] = Field(None, description="New title")
    type: Optional[str] = Field(None, description="New type")
    tags: Optional[List[str]] = Field(None, description="Replacement tag list; [] clears the tags")
    body: Optional[str] = Field(None, description="New body")

    model_config = {"extra": "forbid"}


# --- Media Schemas ---
class MediaAttachRequest(BaseModel):
    filename: str = Field(..., min_length=1, description="Stored filename returned by the upload endpoint")
    url: str = Field(..., min_length=1, description="Public URL of the blob")
    mimetype: str = Field(..., min_length=1, description="Declared mimetype")
    kind: Optional[MediaKind] = Field(None, description="Derived from mimetype when omitted")

    model_config = {"extra": "forbid"}

    @field_validator("filename")
    @classmethod
    def filename_must_be_bare(cls, value: str) -> str:
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError("filename must not contain path separators")
        return value

    def to_reference(self) -> MediaReference:
        return MediaReference(
            filename=self.filename,
            url=self.url,
            mimetype=self.mimetype,
            kind=self.kind or classify_media_kind(self.mimetype),
        )


# --- General API Response Schemas ---
class DeleteResponse(BaseModel):
    ok: bool = True


class DetailResponse(BaseModel):
    detail: str

#
# End of lore_schemas.py
#######################################################################################################################
