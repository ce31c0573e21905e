"""
FavTube - Database Models
SQLAlchemy models for the database storage backend
"""

from .library import UserLibraryRecord

__all__ = [
    "UserLibraryRecord",
]
