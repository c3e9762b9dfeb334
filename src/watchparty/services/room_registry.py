"""RoomRegistry - in-memory map of active rooms."""

import logging
from typing import Dict, Iterator, Optional

from watchparty.models.playback_state import PlaybackState
from watchparty.models.room import Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """
    Owns every active room for the lifetime of the process.

    Nothing is persisted; state is lost on restart. All mutation happens
    on the event loop thread, between awaits, so no locking is needed.
    """

    def __init__(self):
        # Map of room_id -> Room
        self._rooms: Dict[str, Room] = {}

    def get_or_create(self, room_id: str) -> Room:
        """Return the room for ``room_id``, creating it with a default playback state."""
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id=room_id, playback_state=PlaybackState())
            self._rooms[room_id] = room
            logger.info("[Rooms] Created room %s", room_id)
        return room

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def remove(self, room_id: str) -> None:
        """Delete a room. No-op if absent."""
        if self._rooms.pop(room_id, None) is not None:
            logger.info("[Rooms] Room %s deleted (empty)", room_id)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))
