"""
FavTube - Metadata Resolution
Turns a user-supplied locator (URL, video id or search query) into a VideoRef
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..errors import NotFoundError, ResolutionError, ValidationError
from ..schemas import VideoRef
from ..utils.youtube import (
    VIDEO_ID_RE,
    extract_video_id,
    looks_like_url,
    parse_iso_duration,
    thumbnail_for,
)

logger = logging.getLogger(__name__)


class YouTubeResolver:
    """
    YouTube metadata lookup

    Without an API key only oEmbed is used (title and thumbnail). With a key the
    Data API also provides duration and view count and enables search queries.
    """

    OEMBED_URL = "https://www.youtube.com/oembed"
    DATA_API_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "YouTubeResolver":
        return cls(api_key=settings.YOUTUBE_API_KEY, timeout=settings.RESOLVER_TIMEOUT)

    async def resolve(self, locator: str) -> VideoRef:
        """
        Resolve a locator to a VideoRef

        Args:
            locator: YouTube URL, bare video id, or free-text search query

        Returns:
            Descriptor ready to be added to a playlist

        Raises:
            ValidationError: malformed locator, or a search without an API key
            NotFoundError: no such video / no search results
            ResolutionError: upstream request failed
        """
        locator = (locator or "").strip()
        if not locator:
            raise ValidationError("Locator is required")

        if looks_like_url(locator) or VIDEO_ID_RE.match(locator):
            video_id = extract_video_id(locator)
        elif self.api_key:
            video_id = await self._search(locator)
        else:
            raise ValidationError("Searching by text requires YOUTUBE_API_KEY")

        if self.api_key:
            return await self._from_data_api(video_id)
        return await self._from_oembed(video_id)

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url, params=params)
                if response.status_code in (401, 403, 404) and url == self.OEMBED_URL:
                    raise NotFoundError("Video not found or not embeddable")
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                logger.error(f"YouTube request failed: {e.response.status_code} {url}")
                raise ResolutionError(
                    f"YouTube returned HTTP {e.response.status_code}"
                ) from e
            except httpx.HTTPError as e:
                logger.error(f"YouTube request error: {type(e).__name__}: {e}")
                raise ResolutionError(f"Could not reach YouTube: {e}") from e
            except ValueError as e:
                raise ResolutionError("YouTube returned an invalid response") from e

    async def _from_oembed(self, video_id: str) -> VideoRef:
        data = await self._get_json(
            self.OEMBED_URL,
            {"url": f"https://www.youtube.com/watch?v={video_id}", "format": "json"},
        )
        logger.info(f"Resolved {video_id} via oEmbed")
        return VideoRef(
            id=video_id,
            title=data.get("title") or video_id,
            thumbnail_url=data.get("thumbnail_url") or thumbnail_for(video_id),
        )

    async def _from_data_api(self, video_id: str) -> VideoRef:
        data = await self._get_json(
            f"{self.DATA_API_URL}/videos",
            {
                "part": "snippet,contentDetails,statistics",
                "id": video_id,
                "key": self.api_key,
            },
        )
        items = data.get("items") or []
        if not items:
            raise NotFoundError(f"Video {video_id} not found")

        item = items[0]
        snippet = item.get("snippet") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = None
        for size in ("high", "medium", "default"):
            if thumbnails.get(size, {}).get("url"):
                thumbnail = thumbnails[size]["url"]
                break

        views = (item.get("statistics") or {}).get("viewCount")
        logger.info(f"Resolved {video_id} via Data API")
        return VideoRef(
            id=video_id,
            title=snippet.get("title") or video_id,
            thumbnail_url=thumbnail or thumbnail_for(video_id),
            duration=parse_iso_duration((item.get("contentDetails") or {}).get("duration")),
            view_count=int(views) if views and str(views).isdigit() else None,
        )

    async def _search(self, query: str) -> str:
        data = await self._get_json(
            f"{self.DATA_API_URL}/search",
            {
                "part": "snippet",
                "type": "video",
                "maxResults": 1,
                "q": query,
                "key": self.api_key,
            },
        )
        for item in data.get("items") or []:
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                logger.debug(f"Search '{query}' matched {video_id}")
                return video_id
        raise NotFoundError(f"No videos found for '{query}'")
