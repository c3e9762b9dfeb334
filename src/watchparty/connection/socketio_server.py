"""Socket.IO server for real-time watch party events.

Event surface (default namespace):
- join-room     client -> server  {roomId, userName}
- video-action  client -> server  {action, time, roomId}
- room-state    server -> joiner  {participants, videoState}
- user-joined   server -> room    {userName, participants}
- user-left     server -> room    {userName, participants}
- sync-video    server -> room    {action, time, timestamp, from}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import socketio
from pydantic import ValidationError

from watchparty.api.schemas.events import JOIN_ROOM, VIDEO_ACTION, JoinRoomEvent, VideoActionEvent
from watchparty.connection.session_manager import SessionManager
from watchparty.connection.socketio_broadcaster import DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)


# =============================================================================
# Socket.IO Server Configuration
# =============================================================================

def create_socketio_server(allowed_origins: Union[str, List[str]] = "*") -> socketio.AsyncServer:
    """Create the async Socket.IO server."""
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=allowed_origins,
        ping_timeout=30,
        ping_interval=25,
        logger=False,  # Socket.IO internal logging is too verbose
        engineio_logger=False,
    )


def _payload_errors(exc: ValidationError) -> List[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]


# =============================================================================
# Event Handlers
# =============================================================================

def register_handlers(sio, manager: SessionManager, namespace: str = DEFAULT_NAMESPACE) -> None:
    """Bind the watch party event table to a Socket.IO server.

    Every handler logs and swallows unexpected errors so a fault in one
    connection's handling never reaches other sessions.
    """

    @sio.on("connect", namespace=namespace)
    async def connect(sid: str, environ: Dict, auth: Optional[Dict] = None):
        """Handle new socket connection."""
        try:
            manager.connect(sid)
        except Exception as e:
            logger.error("[SocketIO] connect failed | sid=%s: %s", sid, e, exc_info=True)

    @sio.on("disconnect", namespace=namespace)
    async def disconnect(sid: str, reason: Any = None):
        """Handle socket disconnection, graceful or not."""
        try:
            await manager.disconnect(sid)
        except Exception as e:
            logger.error("[SocketIO] disconnect cleanup failed | sid=%s: %s", sid, e, exc_info=True)

    @sio.on(JOIN_ROOM, namespace=namespace)
    async def join_room(sid: str, data: Any = None):
        """Handle a request to join (or switch to) a room."""
        try:
            event = JoinRoomEvent.model_validate(data or {})
        except ValidationError as e:
            logger.warning("[SocketIO] Malformed %s | sid=%s errors=%s", JOIN_ROOM, sid, _payload_errors(e))
            return

        try:
            await manager.join(sid, event.room_id, event.user_name)
        except Exception as e:
            logger.error("[SocketIO] %s failed | sid=%s room=%s: %s", JOIN_ROOM, sid, event.room_id, e, exc_info=True)

    @sio.on(VIDEO_ACTION, namespace=namespace)
    async def video_action(sid: str, data: Any = None):
        """Handle a play/pause/seek action from a client."""
        try:
            event = VideoActionEvent.model_validate(data or {})
        except ValidationError as e:
            logger.warning("[SocketIO] Malformed %s | sid=%s errors=%s", VIDEO_ACTION, sid, _payload_errors(e))
            return

        try:
            await manager.video_action(sid, event.action, event.time, room_id=event.room_id)
        except Exception as e:
            logger.error("[SocketIO] %s failed | sid=%s: %s", VIDEO_ACTION, sid, e, exc_info=True)


# =============================================================================
# ASGI App
# =============================================================================

def create_socketio_app(sio: socketio.AsyncServer, other_app):
    """Create Socket.IO ASGI app wrapping another ASGI app.

    Args:
        sio: The Socket.IO server
        other_app: The main ASGI app (e.g., FastAPI)

    Returns:
        Combined ASGI app with Socket.IO
    """
    return socketio.ASGIApp(sio, other_asgi_app=other_app)
