"""
FavTube - Playlist View
Filtered and sorted projection of playlist items for display
"""

import unicodedata
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Tuple

from ..errors import ValidationError
from ..schemas import VideoRef

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class SortMode(str, Enum):
    """Display orders; values are what the API accepts in ``sort``"""

    INSERTION_ORDER = "insertion"
    TITLE_ASCENDING = "title"
    RATING_DESCENDING = "rating"
    ADDED_DESCENDING = "added"

    @classmethod
    def parse(cls, value: str) -> "SortMode":
        try:
            return cls(value or cls.INSERTION_ORDER.value)
        except ValueError:
            options = ", ".join(mode.value for mode in cls)
            raise ValidationError(f"Unknown sort mode '{value}' (expected one of: {options})")


def title_key(title: str) -> Tuple[str, str, str]:
    """
    Collation key approximating a locale-aware compare

    Accents and case are ignored first, then case, then the raw text.
    """
    folded = title.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base, folded, title


def _added_at(item: VideoRef) -> datetime:
    return item.added_at or _EPOCH


def project(
    items: Iterable[VideoRef],
    filter_text: str = "",
    sort_mode: SortMode = SortMode.INSERTION_ORDER,
) -> List[VideoRef]:
    """
    Filter by title and order items for display

    Args:
        items: Playlist items in insertion order
        filter_text: Case-insensitive substring matched against titles
        sort_mode: Ordering to apply

    Returns:
        New list; the input is never modified
    """
    result = list(items)

    term = (filter_text or "").strip().casefold()
    if term:
        result = [item for item in result if term in item.title.casefold()]

    # sorted() is stable, so equal keys keep insertion order
    if sort_mode == SortMode.TITLE_ASCENDING:
        result = sorted(result, key=lambda item: title_key(item.title))
    elif sort_mode == SortMode.RATING_DESCENDING:
        result = sorted(result, key=lambda item: (-item.rating, title_key(item.title)))
    elif sort_mode == SortMode.ADDED_DESCENDING:
        result = sorted(result, key=_added_at, reverse=True)

    return result
