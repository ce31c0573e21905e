"""FavTube package."""

from .errors import (
    DuplicateNameError,
    DuplicateVideoError,
    EmptyQueueError,
    FavTubeError,
    NotFoundError,
    PersistenceError,
    ResolutionError,
    ValidationError,
)

__all__ = [
    "DuplicateNameError",
    "DuplicateVideoError",
    "EmptyQueueError",
    "FavTubeError",
    "NotFoundError",
    "PersistenceError",
    "ResolutionError",
    "ValidationError",
]
