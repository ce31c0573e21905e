"""
FavTube - Playlist Store
Per-user playlists with cross-playlist duplicate prevention
"""

import logging
import re
import secrets
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Tuple

from ..errors import DuplicateNameError, DuplicateVideoError, NotFoundError, ValidationError
from ..schemas import Playlist, UserLibrary, VideoRef
from .persistence import LibraryRepository

logger = logging.getLogger(__name__)

# No leading dot, so "." and ".." never name a file or directory
USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]{0,63}$")


def make_id(prefix: str = "id") -> str:
    """Generate an opaque id such as ``pl_3f9c0a1b2d4e5f60``"""
    return f"{prefix}_{secrets.token_hex(8)}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlaylistStore:
    """
    Authoritative store of every user's playlists

    Each mutation loads the user's library, checks invariants, applies the
    change and saves the whole library before returning. Mutations for one
    user are serialized by a per-user lock; different users never contend.
    """

    def __init__(
        self,
        repository: LibraryRepository,
        rating_max: int = 5,
        unique_names: bool = False,
    ):
        self.repository = repository
        self.rating_max = rating_max
        self.unique_names = unique_names
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    @contextmanager
    def _editing(self, user_id: str) -> Iterator[UserLibrary]:
        """
        Critical section for one user's library

        The library is saved only when the body completes without raising.
        """
        self._check_user(user_id)
        with self._lock_for(user_id):
            library = self._load(user_id)
            yield library
            self.repository.save_library(user_id, library)

    def _load(self, user_id: str) -> UserLibrary:
        library = self.repository.load_library(user_id)
        clamped = library.clamp_ratings(self.rating_max)
        if clamped:
            logger.warning(
                "Clamped %d stored rating(s) to 0..%d for %s", clamped, self.rating_max, user_id
            )
        return library

    @staticmethod
    def _check_user(user_id: Optional[str]) -> None:
        if not user_id or not USER_ID_PATTERN.match(user_id):
            raise ValidationError("A valid user id is required")

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Playlist name is required")
        return name

    def _check_rating(self, rating: int) -> None:
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationError("Rating must be an integer")
        if not 0 <= rating <= self.rating_max:
            raise ValidationError(f"Rating must be between 0 and {self.rating_max}")

    @staticmethod
    def _require_playlist(library: UserLibrary, playlist_id: str) -> Playlist:
        playlist = library.playlists.get(playlist_id)
        if playlist is None:
            raise NotFoundError(f"Playlist {playlist_id} not found")
        return playlist

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_library(self, user_id: str) -> UserLibrary:
        self._check_user(user_id)
        return self._load(user_id)

    def list_playlists(self, user_id: str) -> List[Playlist]:
        return list(self.get_library(user_id).playlists.values())

    def get_playlist(self, user_id: str, playlist_id: str) -> Playlist:
        return self._require_playlist(self.get_library(user_id), playlist_id)

    def find_video(self, user_id: str, video_id: str) -> Optional[Tuple[Playlist, VideoRef]]:
        """Return the playlist holding video_id and the stored item, if any"""
        return self.get_library(user_id).find_video(video_id)

    def is_video_favorited(self, user_id: str, video_id: str) -> bool:
        return self.find_video(user_id, video_id) is not None

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    def create_playlist(self, user_id: str, name: str) -> Playlist:
        name = self._clean_name(name)
        with self._editing(user_id) as library:
            if self.unique_names and library.has_name(name):
                raise DuplicateNameError(f"Playlist '{name}' already exists")

            playlist_id = make_id("pl")
            while playlist_id in library.playlists:
                playlist_id = make_id("pl")

            playlist = Playlist(id=playlist_id, name=name, items=[], created_at=utcnow())
            library.playlists[playlist.id] = playlist

        logger.info("Created playlist %s (%s) for %s", playlist.id, name, user_id)
        return playlist

    def rename_playlist(self, user_id: str, playlist_id: str, name: str) -> Playlist:
        name = self._clean_name(name)
        with self._editing(user_id) as library:
            playlist = self._require_playlist(library, playlist_id)
            if self.unique_names and library.has_name(name, exclude_id=playlist_id):
                raise DuplicateNameError(f"Playlist '{name}' already exists")
            playlist.name = name

        logger.info("Renamed playlist %s to %s for %s", playlist_id, name, user_id)
        return playlist

    def delete_playlist(self, user_id: str, playlist_id: str) -> None:
        with self._editing(user_id) as library:
            self._require_playlist(library, playlist_id)
            del library.playlists[playlist_id]

        logger.info("Deleted playlist %s for %s", playlist_id, user_id)

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------

    def add_video(self, user_id: str, playlist_id: str, video: VideoRef) -> VideoRef:
        """
        Append a video to a playlist

        Args:
            user_id: Owner of the library
            playlist_id: Target playlist
            video: Resolved descriptor; rating defaults to 0

        Returns:
            The stored copy, with added_at set

        Raises:
            NotFoundError: playlist missing
            DuplicateVideoError: video.id is already in any of the user's playlists
            ValidationError: rating out of range
        """
        self._check_rating(video.rating)
        with self._editing(user_id) as library:
            playlist = self._require_playlist(library, playlist_id)

            existing = library.find_video(video.id)
            if existing is not None:
                holder, _ = existing
                logger.warning(
                    "Rejected duplicate video %s for %s (already in %s)",
                    video.id,
                    user_id,
                    holder.id,
                )
                raise DuplicateVideoError(video.id, holder.id, holder.name)

            stored = video.model_copy(update={"added_at": utcnow()})
            playlist.items.append(stored)

        logger.debug("Added video %s to playlist %s for %s", video.id, playlist_id, user_id)
        return stored

    def remove_video(self, user_id: str, playlist_id: str, video_id: str) -> None:
        """Remove a video; removing an id that is not there is a no-op"""
        with self._editing(user_id) as library:
            playlist = self._require_playlist(library, playlist_id)
            playlist.items = [item for item in playlist.items if item.id != video_id]

        logger.debug("Removed video %s from playlist %s for %s", video_id, playlist_id, user_id)

    def set_rating(self, user_id: str, playlist_id: str, video_id: str, rating: int) -> VideoRef:
        self._check_rating(rating)
        with self._editing(user_id) as library:
            playlist = self._require_playlist(library, playlist_id)
            index = playlist.index_of(video_id)
            if index < 0:
                raise NotFoundError(f"Video {video_id} not found in playlist {playlist_id}")
            updated = playlist.items[index].model_copy(update={"rating": rating})
            playlist.items[index] = updated

        logger.debug("Rated video %s as %d for %s", video_id, rating, user_id)
        return updated
