"""
FavTube - Player Schemas
"""

from pydantic import BaseModel, Field
from typing import Optional

from .video import VideoRef


class PlayerLoad(BaseModel):
    """Start playing a playlist as currently filtered and sorted"""

    playlist_id: str
    q: str = ""
    sort: str = Field(default="insertion", pattern="^(insertion|title|rating|added)$")


class PlayerStatus(BaseModel):
    state: str
    position: int = 0
    length: int = 0
    current: Optional[VideoRef] = None
    end_of_queue: bool = False
