"""
FavTube - API Dependencies
Access to the shared store, player registry and resolver
"""

from fastapi import Request

from ..errors import ValidationError
from ..services import PlayerRegistry, PlaylistStore, YouTubeResolver
from ..services.playlist_store import USER_ID_PATTERN


def get_store(request: Request) -> PlaylistStore:
    return request.app.state.store


def get_players(request: Request) -> PlayerRegistry:
    return request.app.state.players


def get_resolver(request: Request) -> YouTubeResolver:
    return request.app.state.resolver


def current_user(user_id: str) -> str:
    """Identity comes from the path; nothing runs without a valid one"""
    if not USER_ID_PATTERN.match(user_id):
        raise ValidationError("A valid user id is required")
    return user_id
