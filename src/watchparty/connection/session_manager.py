"""SessionManager - connection session lifecycle for watch party rooms.

Each operation finishes mutating the registry before its first await, so
on a single event loop no other handler can observe a half-applied join
or leave.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from watchparty.connection.socketio_broadcaster import (
    ROOM_STATE,
    USER_JOINED,
    USER_LEFT,
    EventBroadcaster,
)
from watchparty.models.connection_session import ConnectionSession, SessionState
from watchparty.models.participant import Participant
from watchparty.services.playback_synchronizer import PlaybackSynchronizer
from watchparty.services.room_registry import RoomRegistry

logger = logging.getLogger(__name__)


@dataclass
class Departure:
    """A membership already removed whose user-left notice is still pending."""
    connection_id: str
    room_id: str
    display_name: Optional[str]
    participants: List[Dict[str, str]] = field(default_factory=list)


class SessionManager:
    """Tracks live connections and moves them between rooms."""

    def __init__(
        self,
        registry: RoomRegistry,
        broadcaster: EventBroadcaster,
        synchronizer: Optional[PlaybackSynchronizer] = None,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.synchronizer = synchronizer or PlaybackSynchronizer(registry, broadcaster)
        # Map of connection_id -> ConnectionSession
        self._sessions: Dict[str, ConnectionSession] = {}

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_session(self, connection_id: str) -> Optional[ConnectionSession]:
        return self._sessions.get(connection_id)

    @property
    def connection_count(self) -> int:
        return len(self._sessions)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def connect(self, connection_id: str) -> ConnectionSession:
        """Create a session in the Connected state."""
        session = ConnectionSession(connection_id=connection_id)
        self._sessions[connection_id] = session
        logger.info("[SocketIO] User connected: %s", connection_id)
        return session

    def _is_live(self, session: ConnectionSession, room_id: str) -> bool:
        """True while ``session`` is still connected and still in ``room_id``."""
        return self._sessions.get(session.connection_id) is session and session.current_room_id == room_id

    def _remove_from_room(self, session: ConnectionSession) -> Optional[Departure]:
        """Drop a session's room membership. Never awaits.

        Deletes the room when it empties and returns the notification still
        owed to the remaining members, or None if the session was in no room.
        """
        if not session.in_room:
            return None

        room_id = session.current_room_id
        session.current_room_id = None
        session.state = SessionState.CONNECTED

        participants = []
        room = self.registry.get(room_id)
        if room is not None:
            room.remove_participant(session.connection_id)
            if room.is_empty():
                self.registry.remove(room_id)
            participants = room.participant_list()

        return Departure(
            connection_id=session.connection_id,
            room_id=room_id,
            display_name=session.display_name,
            participants=participants,
        )

    async def _announce_departure(self, departure: Departure) -> None:
        await self.broadcaster.detach(departure.connection_id, departure.room_id)
        if departure.participants:
            await self.broadcaster.broadcast(
                departure.room_id,
                USER_LEFT,
                {"userName": departure.display_name, "participants": departure.participants},
                exclude_connection_id=departure.connection_id,
            )
        logger.info("[Rooms] %s left room: %s", departure.display_name, departure.room_id)

    async def join(self, connection_id: str, room_id: str, display_name: str) -> Optional[Dict[str, Any]]:
        """Place a connection in a room, leaving its previous room first.

        Both memberships change before the first await. The joiner then
        receives a full room snapshot and everyone else already in the room
        receives the updated participant list. Notifications stop early if
        the connection disconnects or moves on while they are being sent.

        Returns:
            The snapshot sent to the joiner, or None if the join was dropped
        """
        session = self._sessions.get(connection_id)
        if session is None:
            logger.debug("[Rooms] Dropped join to %s from unknown connection %s", room_id, connection_id)
            return None

        departure = self._remove_from_room(session)

        room = self.registry.get_or_create(room_id)
        room.add_participant(Participant(connection_id=connection_id, display_name=display_name))
        session.current_room_id = room_id
        session.display_name = display_name
        session.state = SessionState.IN_ROOM

        snapshot = room.snapshot()
        participants = snapshot["participants"]

        if departure is not None:
            await self._announce_departure(departure)
            if not self._is_live(session, room_id):
                return None

        await self.broadcaster.attach(connection_id, room_id)
        if not self._is_live(session, room_id):
            await self.broadcaster.detach(connection_id, room_id)
            return None

        await self.broadcaster.send_to_connection(connection_id, ROOM_STATE, snapshot)
        if not self._is_live(session, room_id):
            return None

        await self.broadcaster.broadcast(
            room_id,
            USER_JOINED,
            {"userName": display_name, "participants": participants},
            exclude_connection_id=connection_id,
        )

        logger.info("[Rooms] %s joined room: %s", display_name, room_id)
        return snapshot

    async def leave(self, connection_id: str) -> None:
        """Remove a connection from its current room, if any.

        An emptied room is deleted; otherwise the remaining participants
        receive the updated list.
        """
        session = self._sessions.get(connection_id)
        if session is None:
            return

        departure = self._remove_from_room(session)
        if departure is not None:
            await self._announce_departure(departure)

    async def disconnect(self, connection_id: str) -> None:
        """Drop the session and its room membership. Safe to call twice.

        The session and its participant entry are gone before the first
        await, so no later event for the room can reach this connection.
        """
        session = self._sessions.pop(connection_id, None)
        if session is None:
            return

        departure = self._remove_from_room(session)
        session.state = SessionState.DISCONNECTED

        if departure is not None:
            await self._announce_departure(departure)
        logger.info("[SocketIO] User disconnected: %s", connection_id)

    # =========================================================================
    # Playback
    # =========================================================================

    async def video_action(
        self,
        connection_id: str,
        action: Any,
        time: float,
        room_id: Optional[str] = None,
    ) -> bool:
        """Forward a playback action from a connection to the synchronizer.

        Without an explicit room id the sender's current room is used.
        """
        session = self._sessions.get(connection_id)
        target_room = room_id or (session.current_room_id if session else None)
        if not target_room:
            logger.debug("[Playback] %s sent %r with no room", connection_id, action)
            return False

        origin_name = session.display_name if session else None
        return await self.synchronizer.apply_action(
            target_room,
            action,
            time,
            origin_connection_id=connection_id,
            origin_name=origin_name,
        )
