"""
FavTube - Configuration
Application settings and environment variables
"""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Optional, Union


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "FavTube"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Storage
    DATA_DIR: str = "data"
    UPLOADS_DIR: str = "data/uploads"
    STORAGE_BACKEND: str = "json"  # 'json' or 'database'
    DATABASE_URL: Optional[str] = None  # NULL = SQLite file under DATA_DIR

    # Playlists
    RATING_MAX: int = 5
    UNIQUE_PLAYLIST_NAMES: bool = False
    UPLOAD_MAX_BYTES: int = 25 * 1024 * 1024

    # Metadata resolution
    YOUTUBE_API_KEY: Optional[str] = None
    RESOLVER_TIMEOUT: float = 10.0

    # CORS
    CORS_ORIGINS: Union[list[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def check_storage_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("json", "database"):
            raise ValueError("STORAGE_BACKEND must be 'json' or 'database'")
        return v

    @field_validator("RATING_MAX")
    @classmethod
    def check_rating_max(cls, v: int) -> int:
        if v < 1:
            raise ValueError("RATING_MAX must be at least 1")
        return v

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or f"sqlite:///{self.DATA_DIR}/favtube.db"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
