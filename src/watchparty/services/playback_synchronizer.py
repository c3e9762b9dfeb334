"""PlaybackSynchronizer - applies playback actions and relays them to the room."""

import logging
from typing import Any, Dict, Optional

from watchparty.connection.socketio_broadcaster import SYNC_VIDEO, EventBroadcaster
from watchparty.models.playback_state import PlaybackAction, now_ms
from watchparty.services.room_registry import RoomRegistry

logger = logging.getLogger(__name__)


class PlaybackSynchronizer:
    """
    Keeps each room's canonical playback state.

    Actions are applied in arrival order with no version check: the last
    action processed wins.
    """

    def __init__(self, registry: RoomRegistry, broadcaster: EventBroadcaster):
        self.registry = registry
        self.broadcaster = broadcaster

    def apply(self, room_id: str, action: Any, time: float) -> Optional[int]:
        """Mutate the room's playback state.

        Args:
            room_id: Target room
            action: Raw action value; unrecognized values leave state untouched
            time: Client-reported position in seconds

        Returns:
            The action timestamp in epoch ms, or None if the room is absent
        """
        room = self.registry.get(room_id)
        if room is None:
            return None

        now = now_ms()
        state = room.playback_state
        parsed = PlaybackAction.parse(action)

        if parsed is PlaybackAction.PLAY:
            state.is_playing = True
            state.current_time = time
            state.last_update = now
        elif parsed is PlaybackAction.PAUSE:
            state.is_playing = False
            state.current_time = time
            state.last_update = now
        elif parsed is PlaybackAction.SEEK:
            state.current_time = time
            state.last_update = now
        else:
            logger.debug("[Playback] Unrecognized action %r in room %s, relaying unchanged", action, room_id)

        return now

    async def apply_action(
        self,
        room_id: str,
        action: Any,
        time: float,
        origin_connection_id: str,
        origin_name: Optional[str] = None,
    ) -> bool:
        """Apply an action and relay it to everyone else in the room.

        Actions for rooms that do not exist are dropped silently.

        Returns:
            True if the action was applied and relayed
        """
        timestamp = self.apply(room_id, action, time)
        if timestamp is None:
            logger.debug("[Playback] Dropped %r for absent room %s", action, room_id)
            return False

        payload: Dict[str, Any] = {
            "action": action,
            "time": time,
            "timestamp": timestamp,
            "from": origin_name,
        }
        await self.broadcaster.broadcast(room_id, SYNC_VIDEO, payload, exclude_connection_id=origin_connection_id)

        logger.info("[Playback] %s performed %s at %ss in room %s", origin_name, action, time, room_id)
        return True
