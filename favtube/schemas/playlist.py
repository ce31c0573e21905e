"""
FavTube - Playlist Schemas
"""

import logging

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime

from .video import VideoRef

logger = logging.getLogger(__name__)


class Playlist(BaseModel):
    """Named, ordered collection of videos owned by one user"""

    id: str
    name: str
    items: List[VideoRef] = Field(default_factory=list)
    created_at: datetime

    def get_item(self, video_id: str) -> Optional[VideoRef]:
        for item in self.items:
            if item.id == video_id:
                return item
        return None

    def index_of(self, video_id: str) -> int:
        for index, item in enumerate(self.items):
            if item.id == video_id:
                return index
        return -1


class UserLibrary(BaseModel):
    """
    Every playlist of one user, keyed by playlist id in creation order.

    A video id appears in at most one playlist of the library.
    """

    playlists: Dict[str, Playlist] = Field(default_factory=dict)

    def find_video(self, video_id: str) -> Optional[Tuple[Playlist, VideoRef]]:
        for playlist in self.playlists.values():
            item = playlist.get_item(video_id)
            if item is not None:
                return playlist, item
        return None

    def has_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            p.name == name for p in self.playlists.values() if p.id != exclude_id
        )

    def to_document(self) -> dict:
        """Serializable form stored by the repositories"""
        return {
            "playlists": [
                p.model_dump(mode="json") for p in self.playlists.values()
            ]
        }

    @classmethod
    def from_document(cls, document: dict) -> "UserLibrary":
        """
        Build a library from a stored document

        Accepts both FavTube's own snake_case records and the camelCase records
        written by the earlier Node server. A video id already seen in an
        earlier playlist (or earlier in the same playlist) is dropped, so the
        one-playlist-per-video rule holds for every loaded library.
        """
        library = cls()
        seen = set()
        for raw in document.get("playlists", []):
            playlist = Playlist.model_validate(_legacy_playlist(raw))
            items = []
            for item in playlist.items:
                if item.id in seen:
                    logger.warning(
                        "Dropped duplicate video %s from playlist %s on load",
                        item.id,
                        playlist.id,
                    )
                    continue
                seen.add(item.id)
                items.append(item)
            playlist.items = items
            library.playlists[playlist.id] = playlist
        return library

    def clamp_ratings(self, rating_max: int) -> int:
        """Pull stored ratings back into 0..rating_max; returns how many changed"""
        changed = 0
        for playlist in self.playlists.values():
            for index, item in enumerate(playlist.items):
                rating = min(max(item.rating, 0), rating_max)
                if rating != item.rating:
                    playlist.items[index] = item.model_copy(update={"rating": rating})
                    changed += 1
        return changed


# camelCase keys of the earlier Node server and their FavTube names
_LEGACY_PLAYLIST_KEYS = {"createdAt": "created_at"}
_LEGACY_ITEM_KEYS = {
    "thumbnailUrl": "thumbnail_url",
    "addedAt": "added_at",
    "fileUrl": "file_url",
}
_PLACEHOLDER = "—"


def _legacy_playlist(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    playlist = _rename_keys(raw, _LEGACY_PLAYLIST_KEYS)
    if isinstance(playlist.get("items"), list):
        playlist["items"] = [_legacy_item(item) for item in playlist["items"]]
    return playlist


def _legacy_item(raw: Any) -> Any:
    if not isinstance(raw, dict) or not ({"type", "videoId"} & raw.keys()):
        return raw

    item = _rename_keys(raw, _LEGACY_ITEM_KEYS)
    kind = item.pop("type", "youtube")
    item["source"] = "upload" if kind == "mp3" else "youtube"

    # YouTube entries were keyed by videoId; uploads carried their own id
    video_id = item.pop("videoId", None)
    if video_id and item["source"] == "youtube":
        item["id"] = video_id

    views = item.pop("views", None)
    if "view_count" not in item:
        item["view_count"] = _legacy_views(views)

    for key in ("duration", "thumbnail_url"):
        if item.get(key) in (_PLACEHOLDER, ""):
            item[key] = None
    return item


def _legacy_views(views: Any) -> Optional[int]:
    if isinstance(views, bool):
        return None
    if isinstance(views, int):
        return views if views >= 0 else None
    if isinstance(views, str):
        digits = views.replace(",", "").strip()
        if digits.isdigit():
            return int(digits)
    return None


def _rename_keys(raw: dict, names: Dict[str, str]) -> dict:
    renamed = {}
    for key, value in raw.items():
        target = names.get(key, key)
        if target in raw and target != key:
            # The snake_case key wins when both are present
            continue
        renamed[target] = value
    return renamed


class PlaylistCreate(BaseModel):
    """Schema for creating a playlist"""

    name: str = Field(..., min_length=1, max_length=200)


class PlaylistUpdate(BaseModel):
    """Schema for renaming a playlist"""

    name: str = Field(..., min_length=1, max_length=200)


class PlaylistSummary(BaseModel):
    """Playlist without its items"""

    id: str
    name: str
    created_at: datetime
    item_count: int = 0

    @classmethod
    def from_playlist(cls, playlist: Playlist) -> "PlaylistSummary":
        return cls(
            id=playlist.id,
            name=playlist.name,
            created_at=playlist.created_at,
            item_count=len(playlist.items),
        )


class PlaylistResponse(PlaylistSummary):
    """Playlist with its projected items"""

    items: List[VideoRef] = Field(default_factory=list)
    filter: str = ""
    sort: str = "insertion"
