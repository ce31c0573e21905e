"""
FavTube - Errors
Typed failures raised by the playlist core and its collaborators.
"""


class FavTubeError(Exception):
    """Base class; status_code is used when the error crosses the HTTP edge."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(FavTubeError):
    """Referenced playlist, video or player session does not exist."""

    status_code = 404


class DuplicateVideoError(FavTubeError):
    """Video id already lives in one of the user's playlists."""

    status_code = 409

    def __init__(self, video_id: str, playlist_id: str, playlist_name: str = ""):
        label = playlist_name or playlist_id
        super().__init__(f"Video {video_id} already exists in playlist '{label}'")
        self.video_id = video_id
        self.playlist_id = playlist_id


class DuplicateNameError(FavTubeError):
    """Playlist name clash (only with UNIQUE_PLAYLIST_NAMES enabled)."""

    status_code = 409


class ValidationError(FavTubeError):
    status_code = 400


class EmptyQueueError(FavTubeError):
    status_code = 409


class PersistenceError(FavTubeError):
    """Durable state could not be read or written."""

    status_code = 500


class ResolutionError(FavTubeError):
    """Upstream metadata lookup failed."""

    status_code = 502
