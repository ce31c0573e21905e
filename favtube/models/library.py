"""
FavTube - Library Models
One row per user holding the serialized playlists
"""

from sqlalchemy import Column, String, Text, Float

from ..database import Base


class UserLibraryRecord(Base):
    """
    Persisted UserLibrary

    The whole library is stored as one JSON document so that a save is a
    single-row write.
    """

    __tablename__ = "user_libraries"

    user_id = Column(String, primary_key=True)
    payload = Column(Text, nullable=False)  # JSON: {"playlists": [...]}
    updated_at = Column(Float)

    def __repr__(self):
        return f"<UserLibraryRecord(user_id={self.user_id})>"
