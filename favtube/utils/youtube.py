"""
FavTube - YouTube Utilities
Locator parsing and display formatting
"""

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from ..errors import ValidationError

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_FALLBACK_RE = re.compile(r"(?:v=|be/|embed/|shorts/)([A-Za-z0-9_-]{11})")
_ISO_DURATION_RE = re.compile(r"^P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")


def looks_like_url(locator: str) -> bool:
    locator = locator.strip().lower()
    return locator.startswith(("http://", "https://", "www.", "youtube.com", "m.youtube.com", "youtu.be"))


def extract_video_id(locator: str) -> str:
    """
    Extract a YouTube video id from a URL or a bare id

    Supports youtu.be/<id>, youtube.com/watch?v=<id>, /embed/<id> and
    /shorts/<id>.

    Raises:
        ValidationError: no video id could be found
    """
    locator = (locator or "").strip()
    if VIDEO_ID_RE.match(locator):
        return locator

    candidate = locator if "://" in locator else f"https://{locator}"
    parsed = urlparse(candidate)
    host = (parsed.hostname or "").lower()

    video_id = None
    if host == "youtu.be" or host.endswith(".youtu.be"):
        video_id = parsed.path.lstrip("/").split("/")[0]
    elif host == "youtube.com" or host.endswith(".youtube.com"):
        if parsed.path == "/watch":
            video_id = (parse_qs(parsed.query).get("v") or [""])[0]
        else:
            parts = [p for p in parsed.path.split("/") if p]
            if len(parts) >= 2 and parts[0] in ("embed", "shorts", "v", "live"):
                video_id = parts[1]

    if not video_id:
        match = _FALLBACK_RE.search(locator)
        video_id = match.group(1) if match else None

    if not video_id or not VIDEO_ID_RE.match(video_id):
        raise ValidationError(f"Not a YouTube video locator: {locator!r}")
    return video_id


def parse_iso_duration(value: Optional[str]) -> Optional[str]:
    """Format an ISO 8601 duration (PT#H#M#S) as m:ss or h:mm:ss"""
    if not value:
        return None
    match = _ISO_DURATION_RE.match(value.strip())
    if not match or not any(match.groups()):
        return None

    days, hours, minutes, seconds = (int(g or 0) for g in match.groups())
    total = days * 86400 + hours * 3600 + minutes * 60 + seconds
    hh, rest = divmod(total, 3600)
    mm, ss = divmod(rest, 60)
    if hh:
        return f"{hh}:{mm:02d}:{ss:02d}"
    return f"{mm}:{ss:02d}"


def thumbnail_for(video_id: str) -> str:
    return f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
