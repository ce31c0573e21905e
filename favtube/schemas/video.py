"""
FavTube - Video Schemas
Immutable descriptor of a playable item
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class VideoRef(BaseModel):
    """
    Playable item stored in a playlist.

    `id` is opaque (a YouTube video id, or a generated id for an upload) and is
    the only thing compared when looking for duplicates.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=500)
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None  # Display only, e.g. "3:45"
    view_count: Optional[int] = Field(None, ge=0)
    rating: int = 0
    added_at: Optional[datetime] = None  # Set by the store on insertion
    source: str = Field(default="youtube", pattern="^(youtube|upload)$")
    file_url: Optional[str] = None

    @field_validator("id", "title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return _strip_required(v)


class VideoCreate(BaseModel):
    """Request body for adding an already-resolved video"""

    id: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=500)
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None
    view_count: Optional[int] = Field(None, ge=0)
    rating: Optional[int] = None

    @field_validator("id", "title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return _strip_required(v)

    def to_video(self) -> VideoRef:
        return VideoRef(**self.model_dump(exclude_none=True))


class RatingUpdate(BaseModel):
    """Request body for rating a video (bounds are checked by the store)"""

    rating: int


class FavoriteStatus(BaseModel):
    video_id: str
    favorited: bool
    playlist_id: Optional[str] = None
    playlist_name: Optional[str] = None


class ResolveRequest(BaseModel):
    locator: str = Field(..., min_length=1, max_length=2000)
