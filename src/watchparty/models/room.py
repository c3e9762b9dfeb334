"""Room data model - a named group of participants sharing one playback state."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from watchparty.models.participant import Participant
from watchparty.models.playback_state import PlaybackState


@dataclass
class Room:
    """
    An ephemeral room keyed by a client-chosen id.

    Created lazily on first join and removed by the registry once the last
    participant leaves.
    """
    room_id: str
    participants: Dict[str, Participant] = field(default_factory=dict)
    playback_state: PlaybackState = field(default_factory=PlaybackState)

    def add_participant(self, participant: Participant) -> None:
        self.participants[participant.connection_id] = participant

    def remove_participant(self, connection_id: str) -> bool:
        """Remove a participant. Returns True if it was present."""
        return self.participants.pop(connection_id, None) is not None

    def connection_ids(self) -> List[str]:
        return list(self.participants)

    def is_empty(self) -> bool:
        return not self.participants

    def participant_list(self) -> List[Dict[str, str]]:
        """Participants in their wire shape."""
        return [p.to_dict() for p in self.participants.values()]

    def snapshot(self) -> Dict[str, Any]:
        """Full room state sent to a newly joined connection."""
        return {
            "participants": self.participant_list(),
            "videoState": self.playback_state.to_dict(),
        }
