"""Watch party models package - re-exports for public API"""

from watchparty.models.participant import Participant
from watchparty.models.playback_state import PlaybackAction, PlaybackState, now_ms
from watchparty.models.room import Room
from watchparty.models.connection_session import ConnectionSession, SessionState

__all__ = [
    "Participant",
    "PlaybackAction",
    "PlaybackState",
    "now_ms",
    "Room",
    "ConnectionSession",
    "SessionState",
]
