"""FastAPI application wrapped with the Socket.IO server."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from watchparty import __version__
from watchparty.api.routes.video import router as video_router
from watchparty.config.settings import Settings, get_settings
from watchparty.connection.session_manager import SessionManager
from watchparty.connection.socketio_broadcaster import EventBroadcaster
from watchparty.connection.socketio_server import (
    create_socketio_app,
    create_socketio_server,
    register_handlers,
)
from watchparty.services.playback_synchronizer import PlaybackSynchronizer
from watchparty.services.room_registry import RoomRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("Server running on port %s", settings.port)
    if not settings.video_path.is_file():
        logger.warning("Make sure to place your video file at: %s", settings.video_path)
    yield
    logger.info("Shutting down with %d active rooms", len(app.state.registry))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the HTTP app and the room coordination core it hosts.

    The registry is created here, once per app, and injected into every
    component that needs it.
    """
    settings = settings or get_settings()

    registry = RoomRegistry()
    sio = create_socketio_server(settings.allowed_origins)
    broadcaster = EventBroadcaster(sio, registry)
    synchronizer = PlaybackSynchronizer(registry, broadcaster)
    session_manager = SessionManager(registry, broadcaster, synchronizer)
    register_handlers(sio, session_manager)

    app = FastAPI(title="Watch Party", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.registry = registry
    app.state.sio = sio
    app.state.session_manager = session_manager

    allow_origins = ["*"] if settings.allowed_origins == "*" else settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health_check(request: Request):
        state = request.app.state
        return {
            "status": "healthy",
            "rooms": len(state.registry),
            "connections": state.session_manager.connection_count,
        }

    app.include_router(video_router)

    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.debug("Static directory %s not found, skipping mount", settings.static_dir)

    return app


def create_socket_app(settings: Optional[Settings] = None):
    """Create the combined ASGI app served by uvicorn."""
    app = create_app(settings)
    return create_socketio_app(app.state.sio, app)
