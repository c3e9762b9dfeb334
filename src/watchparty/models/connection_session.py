"""ConnectionSession data model - per-connection transient state."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionState(Enum):
    """Lifecycle states of a connection session."""
    CONNECTED = "connected"
    IN_ROOM = "in_room"
    DISCONNECTED = "disconnected"


@dataclass
class ConnectionSession:
    """Tracks which room (at most one) a connection currently belongs to."""
    connection_id: str
    current_room_id: Optional[str] = None
    display_name: Optional[str] = None
    state: SessionState = SessionState.CONNECTED

    @property
    def in_room(self) -> bool:
        return self.state == SessionState.IN_ROOM and self.current_room_id is not None
