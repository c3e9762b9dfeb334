"""Participant data model - a connection's membership record in a room."""

from dataclasses import dataclass
from typing import Dict


@dataclass
class Participant:
    """Represents a connected client inside a room."""
    connection_id: str
    display_name: str

    def to_dict(self) -> Dict[str, str]:
        """Serialize to the wire shape clients expect."""
        return {
            "name": self.display_name,
            "socketId": self.connection_id,
        }
