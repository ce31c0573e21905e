"""
FavTube - Services
Business logic layer
"""

from .persistence import LibraryRepository, JsonFileRepository, DatabaseRepository, InMemoryRepository
from .playlist_store import PlaylistStore
from .playlist_view import SortMode, project
from .queue_player import END_OF_QUEUE, PlayerRegistry, PlayerState, QueuePlayer
from .metadata_service import YouTubeResolver

__all__ = [
    "LibraryRepository",
    "JsonFileRepository",
    "DatabaseRepository",
    "InMemoryRepository",
    "PlaylistStore",
    "SortMode",
    "project",
    "END_OF_QUEUE",
    "PlayerRegistry",
    "PlayerState",
    "QueuePlayer",
    "YouTubeResolver",
]
