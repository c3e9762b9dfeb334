"""Schemas for client -> server Socket.IO events."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Client -> server event names
JOIN_ROOM = "join-room"
VIDEO_ACTION = "video-action"


class JoinRoomEvent(BaseModel):
    """Payload of ``join-room``."""
    model_config = ConfigDict(str_strip_whitespace=True)

    room_id: str = Field(min_length=1, validation_alias=AliasChoices("roomId", "roomName"))
    user_name: str = Field(validation_alias="userName")


class VideoActionEvent(BaseModel):
    """Payload of ``video-action``.

    ``action`` is kept as a free string: unrecognized actions are still
    relayed to the room unchanged.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    action: str
    time: float
    room_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("roomId", "roomName"))

    @field_validator("room_id")
    @classmethod
    def _blank_room_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None
