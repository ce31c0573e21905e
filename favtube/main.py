"""
FavTube - FastAPI Application
Main application entry point
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from typing import Optional
import logging

from .config import settings
from .database import create_db_engine, create_session_factory, init_db
from .errors import FavTubeError
from .services import (
    DatabaseRepository,
    JsonFileRepository,
    LibraryRepository,
    PlayerRegistry,
    PlaylistStore,
    YouTubeResolver,
)
from .utils.files import ensure_directory

logger = logging.getLogger(__name__)


def configure_logging():
    """Root logging for the service; level follows DEBUG"""
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_repository() -> LibraryRepository:
    """Persistence backend selected by STORAGE_BACKEND"""
    ensure_directory(settings.DATA_DIR)

    if settings.STORAGE_BACKEND == "database":
        engine = create_db_engine(settings.database_url)
        init_db(engine)
        logger.info(f"Database: {settings.database_url.split('@')[-1]}")  # Hide credentials
        return DatabaseRepository(create_session_factory(engine))

    logger.info(f"JSON storage: {settings.DATA_DIR}")
    return JsonFileRepository(settings.DATA_DIR)


def build_store(repository: Optional[LibraryRepository] = None) -> PlaylistStore:
    return PlaylistStore(
        repository or build_repository(),
        rating_max=settings.RATING_MAX,
        unique_names=settings.UNIQUE_PLAYLIST_NAMES,
    )


def create_app(
    store: Optional[PlaylistStore] = None,
    resolver: Optional[YouTubeResolver] = None,
) -> FastAPI:
    """
    Build the application

    Args:
        store: Pre-built store (tests); built from settings at startup otherwise
        resolver: Metadata resolver; built from settings when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager
        Runs on startup and shutdown
        """
        configure_logging()
        logger.info(f"Starting {settings.APP_NAME} v{settings.VERSION}")

        if getattr(app.state, "store", None) is None:
            app.state.store = build_store()
        ensure_directory(settings.UPLOADS_DIR)

        yield

        logger.info(f"Shutting down {settings.APP_NAME}")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Per-user video playlists with a queue player",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.store = store
    app.state.players = PlayerRegistry()
    app.state.resolver = resolver or YouTubeResolver.from_settings()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FavTubeError)
    async def favtube_error_handler(request: Request, exc: FavTubeError):
        """Typed core errors become their HTTP status"""
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.VERSION,
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "app": settings.APP_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    # API v1 routes
    from .api.v1 import playlists, player, resolve

    app.include_router(playlists.router, prefix="/api/v1", tags=["playlists"])
    app.include_router(player.router, prefix="/api/v1", tags=["player"])
    app.include_router(resolve.router, prefix="/api/v1", tags=["resolve"])

    # Uploaded audio files
    app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False), name="uploads")

    return app


app = create_app()
