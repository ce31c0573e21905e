"""
FavTube - File Utilities
Upload storage helpers
"""

import re
import time
from pathlib import Path

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def ensure_directory(path: str | Path) -> Path:
    """
    Ensure directory exists, create if it doesn't

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str) -> str:
    """Keep the original name but replace anything outside [a-zA-Z0-9._-]"""
    cleaned = _UNSAFE_CHARS.sub("_", Path(name or "").name)
    return cleaned.lstrip(".") or "upload"


def timestamped_filename(name: str) -> str:
    """``<epoch_ms>_<safe name>``, unique enough for per-user upload folders"""
    return f"{int(time.time() * 1000)}_{safe_filename(name)}"


def is_mp3(filename: str, content_type: str | None) -> bool:
    return content_type == "audio/mpeg" or (filename or "").lower().endswith(".mp3")
