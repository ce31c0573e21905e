"""
FavTube - Resolve API
Look up video metadata before adding it to a playlist
"""

from fastapi import APIRouter, Depends

from ..deps import get_resolver
from ...schemas import ResolveRequest, VideoRef
from ...services import YouTubeResolver

router = APIRouter()


@router.post("/resolve", response_model=VideoRef)
async def resolve_locator(
    payload: ResolveRequest,
    resolver: YouTubeResolver = Depends(get_resolver),
):
    """Resolve a YouTube URL, video id or search query"""
    return await resolver.resolve(payload.locator)
