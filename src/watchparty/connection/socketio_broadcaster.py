"""Socket.IO-based broadcaster for room events.

Delivery targets come from the RoomRegistry's participant list rather than
Socket.IO's own room bookkeeping, so an event only ever reaches connections
the registry currently considers members.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from watchparty.services.room_registry import RoomRegistry

logger = logging.getLogger(__name__)

# Server -> client event names
ROOM_STATE = "room-state"
USER_JOINED = "user-joined"
USER_LEFT = "user-left"
SYNC_VIDEO = "sync-video"

DEFAULT_NAMESPACE = "/"


class EventBroadcaster:
    """Delivers named events to the connections of a room.

    Delivery is fire-and-forget: no acknowledgment, no retry. A failure to
    reach one connection is logged and does not stop delivery to the rest.
    """

    def __init__(self, sio, registry: RoomRegistry, namespace: str = DEFAULT_NAMESPACE):
        self.sio = sio
        self.registry = registry
        self.namespace = namespace

    async def broadcast(
        self,
        room_id: str,
        event: str,
        data: Dict[str, Any],
        exclude_connection_id: Optional[str] = None,
    ) -> List[str]:
        """Send an event to every registered connection in a room.

        Args:
            room_id: Room to deliver to; an absent or empty room is a no-op
            event: Event name
            data: Event payload
            exclude_connection_id: Connection to skip, typically the originator

        Returns:
            Connection ids the event was delivered to
        """
        room = self.registry.get(room_id)
        if room is None:
            return []

        targets = [cid for cid in room.connection_ids() if cid != exclude_connection_id]
        delivered = []
        for cid in targets:
            # Membership can change while earlier sends are in flight
            if cid not in room.participants:
                continue
            if await self.send_to_connection(cid, event, data):
                delivered.append(cid)

        logger.debug(
            "[SocketIO] Broadcast %s to %d/%d connections in room %s",
            event, len(delivered), len(targets), room_id
        )
        return delivered

    async def send_to_connection(self, connection_id: str, event: str, data: Dict[str, Any]) -> bool:
        """Send an event to a single connection. Returns False if delivery failed."""
        try:
            await self.sio.emit(event, data, to=connection_id, namespace=self.namespace)
            return True
        except Exception as e:
            logger.debug("[SocketIO] Failed to deliver %s to %s: %s", event, connection_id, e)
            return False

    # =========================================================================
    # Transport room mirroring
    # =========================================================================

    async def attach(self, connection_id: str, room_id: str) -> None:
        """Mirror a registry join onto the transport's room membership."""
        try:
            await self.sio.enter_room(connection_id, room_id, namespace=self.namespace)
        except Exception as e:
            logger.debug("[SocketIO] enter_room failed for %s -> %s: %s", connection_id, room_id, e)

    async def detach(self, connection_id: str, room_id: str) -> None:
        """Mirror a registry leave onto the transport's room membership."""
        try:
            await self.sio.leave_room(connection_id, room_id, namespace=self.namespace)
        except Exception as e:
            logger.debug("[SocketIO] leave_room failed for %s -> %s: %s", connection_id, room_id, e)
