# lore_models.py
# Description: Data model for lore entries and the media references attached to them.
#
# Imports
import time
import uuid
from typing import Any, List, Literal
#
# 3rd-party Libraries
from pydantic import BaseModel, Field, model_validator
#
# Local Imports
#
#######################################################################################################################
#
# Schemas:

MediaKind = Literal["image", "audio", "other"]

DEFAULT_ENTRY_TITLE = "Untitled"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def generate_entry_id() -> str:
    return str(uuid.uuid4())


def classify_media_kind(mimetype: str) -> str:
    """Derives the media kind from a declared mimetype."""
    mimetype = (mimetype or "").lower()
    if mimetype.startswith("image/"):
        return "image"
    if mimetype.startswith("audio/"):
        return "audio"
    return "other"


def clean_tags(tags: List[str]) -> List[str]:
    """Trims every tag and drops the ones left empty. Order and duplicates are kept."""
    return [tag.strip() for tag in tags if tag and tag.strip()]


class MediaReference(BaseModel):
    filename: str = Field(..., description="Stored filename inside the uploads directory")
    url: str = Field(..., description="Public path the blob is served from")
    mimetype: str = Field(..., description="Mimetype declared by the uploading client")
    kind: MediaKind = Field(..., description="image, audio or other, derived from the mimetype")

    @model_validator(mode="before")
    @classmethod
    def derive_missing_kind(cls, data: Any) -> Any:
        # Documents written by older clients may carry references without a kind
        if isinstance(data, dict) and not data.get("kind"):
            data = {**data, "kind": classify_media_kind(data.get("mimetype") or "")}
        return data


class LoreEntry(BaseModel):
    id: str = Field(default_factory=generate_entry_id, description="Opaque unique identifier")
    title: str = Field(DEFAULT_ENTRY_TITLE, description="Display title")
    type: str = Field("", description="Free-text category label")
    tags: List[str] = Field(default_factory=list, description="Ordered tag list")
    body: str = Field("", description="Free text body")
    media: List[MediaReference] = Field(default_factory=list, description="Attached media, in attachment order")
    updated_at: int = Field(default_factory=now_ms, alias="updatedAt",
                            description="Epoch milliseconds of the last change")

    model_config = {"populate_by_name": True}

    def touch(self) -> None:
        self.updated_at = now_ms()

    def to_document(self) -> dict:
        """Serializes the entry the way it is stored and returned over the wire."""
        return self.model_dump(by_alias=True)

    def referenced_filenames(self) -> List[str]:
        return [ref.filename for ref in self.media]

#
# End of lore_models.py
#######################################################################################################################
