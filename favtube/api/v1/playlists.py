"""
FavTube - Playlists API
Per-user playlists, their videos and favorites lookup
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from typing import List, Optional
from pathlib import Path
import logging

from ..deps import current_user, get_store
from ...config import settings
from ...errors import FavTubeError, PersistenceError, ValidationError
from ...schemas import (
    FavoriteStatus,
    PlaylistCreate,
    PlaylistResponse,
    PlaylistSummary,
    PlaylistUpdate,
    RatingUpdate,
    VideoCreate,
    VideoRef,
)
from ...services import PlaylistStore, SortMode, project
from ...services.playlist_store import make_id
from ...utils.files import ensure_directory, is_mp3, timestamped_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/libraries/{user_id}")

CHUNK_SIZE = 1024 * 1024


@router.get("/playlists", response_model=List[PlaylistSummary])
def list_playlists(
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """List playlists in creation order"""
    return [PlaylistSummary.from_playlist(p) for p in store.list_playlists(user_id)]


@router.post("/playlists", response_model=PlaylistSummary, status_code=201)
def create_playlist(
    playlist: PlaylistCreate,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """Create an empty playlist"""
    created = store.create_playlist(user_id, playlist.name)
    return PlaylistSummary.from_playlist(created)


@router.get("/playlists/{playlist_id}", response_model=PlaylistResponse)
def get_playlist(
    playlist_id: str,
    q: str = Query("", description="Case-insensitive title filter"),
    sort: str = Query("insertion", description="insertion, title, rating or added"),
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """
    Get a playlist with its items filtered and sorted for display
    """
    sort_mode = SortMode.parse(sort)
    playlist = store.get_playlist(user_id, playlist_id)

    response = PlaylistSummary.from_playlist(playlist).model_dump()
    return PlaylistResponse(
        **response,
        items=project(playlist.items, q, sort_mode),
        filter=q,
        sort=sort_mode.value,
    )


@router.patch("/playlists/{playlist_id}", response_model=PlaylistSummary)
def rename_playlist(
    playlist_id: str,
    playlist_update: PlaylistUpdate,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """Rename a playlist (its id never changes)"""
    playlist = store.rename_playlist(user_id, playlist_id, playlist_update.name)
    return PlaylistSummary.from_playlist(playlist)


@router.delete("/playlists/{playlist_id}", status_code=204)
def delete_playlist(
    playlist_id: str,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """Delete a playlist and everything in it"""
    store.delete_playlist(user_id, playlist_id)
    return None


@router.post("/playlists/{playlist_id}/videos", response_model=VideoRef, status_code=201)
def add_video(
    playlist_id: str,
    video: VideoCreate,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """
    Add a resolved video to a playlist

    Fails with 409 when the video already lives in any of the user's playlists.
    """
    return store.add_video(user_id, playlist_id, video.to_video())


@router.delete("/playlists/{playlist_id}/videos/{video_id}", status_code=204)
def remove_video(
    playlist_id: str,
    video_id: str,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """Remove a video (removing a missing video is not an error)"""
    store.remove_video(user_id, playlist_id, video_id)
    return None


@router.patch("/playlists/{playlist_id}/videos/{video_id}", response_model=VideoRef)
def rate_video(
    playlist_id: str,
    video_id: str,
    rating_update: RatingUpdate,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """Set a video's rating"""
    return store.set_rating(user_id, playlist_id, video_id, rating_update.rating)


@router.post("/playlists/{playlist_id}/uploads", response_model=VideoRef, status_code=201)
def upload_audio(
    playlist_id: str,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """
    Upload an MP3 and add it to a playlist

    The file is stored under UPLOADS_DIR/<user_id>/ and served from /uploads.
    """
    if not is_mp3(file.filename, file.content_type):
        raise ValidationError("Only MP3 files allowed")

    # Fail before writing anything if the playlist is unknown
    store.get_playlist(user_id, playlist_id)

    uploads_root = Path(settings.UPLOADS_DIR).resolve()
    target_dir = (uploads_root / user_id).resolve()
    if target_dir.parent != uploads_root:
        raise ValidationError("A valid user id is required")
    ensure_directory(target_dir)
    filename = timestamped_filename(file.filename)
    target = target_dir / filename

    written = 0
    try:
        with open(target, "wb") as out:
            while chunk := file.file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > settings.UPLOAD_MAX_BYTES:
                    raise ValidationError(
                        f"File too large (max {settings.UPLOAD_MAX_BYTES} bytes)"
                    )
                out.write(chunk)

        video = VideoRef(
            id=make_id("item"),
            title=(title or "").strip() or file.filename or filename,
            source="upload",
            file_url=f"/uploads/{user_id}/{filename}",
        )
        stored = store.add_video(user_id, playlist_id, video)
    except FavTubeError:
        target.unlink(missing_ok=True)
        raise
    except OSError as e:
        target.unlink(missing_ok=True)
        raise PersistenceError(f"Could not store upload: {e}") from e

    logger.info(f"Stored upload {filename} ({written} bytes) for {user_id}")
    return stored


@router.get("/favorites/{video_id}", response_model=FavoriteStatus)
def favorite_status(
    video_id: str,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
):
    """Whether a video is already saved in one of the user's playlists"""
    found = store.find_video(user_id, video_id)
    if found is None:
        return FavoriteStatus(video_id=video_id, favorited=False)

    playlist, _ = found
    return FavoriteStatus(
        video_id=video_id,
        favorited=True,
        playlist_id=playlist.id,
        playlist_name=playlist.name,
    )
