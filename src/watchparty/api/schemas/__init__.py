"""API schemas package."""

from watchparty.api.schemas.events import (
    JOIN_ROOM,
    VIDEO_ACTION,
    JoinRoomEvent,
    VideoActionEvent,
)

__all__ = [
    "JOIN_ROOM",
    "VIDEO_ACTION",
    "JoinRoomEvent",
    "VideoActionEvent",
]
