"""PlaybackState data model - the room-wide play/pause/position snapshot."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class PlaybackAction(Enum):
    """Playback actions clients can issue."""
    PLAY = "play"
    PAUSE = "pause"
    SEEK = "seek"

    @classmethod
    def parse(cls, value: Any) -> Optional["PlaybackAction"]:
        """Return the matching action, or None for unrecognized values."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class PlaybackState:
    """
    Last-known intended playback state for a room.

    Advisory only: nothing enforces that clients are actually at this
    position. Every applied action overwrites it (last writer wins).
    """
    is_playing: bool = False
    current_time: float = 0.0
    last_update: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isPlaying": self.is_playing,
            "currentTime": self.current_time,
            "lastUpdate": self.last_update,
        }
