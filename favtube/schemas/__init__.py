"""
FavTube - Schemas
Pydantic models for the data model and the HTTP API
"""

from .video import VideoRef, VideoCreate, RatingUpdate, FavoriteStatus, ResolveRequest
from .playlist import (
    Playlist,
    UserLibrary,
    PlaylistCreate,
    PlaylistUpdate,
    PlaylistSummary,
    PlaylistResponse,
)
from .player import PlayerLoad, PlayerStatus

__all__ = [
    "VideoRef",
    "VideoCreate",
    "RatingUpdate",
    "FavoriteStatus",
    "ResolveRequest",
    "Playlist",
    "UserLibrary",
    "PlaylistCreate",
    "PlaylistUpdate",
    "PlaylistSummary",
    "PlaylistResponse",
    "PlayerLoad",
    "PlayerStatus",
]
