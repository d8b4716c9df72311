"""
WebSocket message schemas.

Every message is a flat JSON object tagged by `type`. Inbound messages are
parsed through `client_message_adapter`, a discriminated union over the
client intents; outbound messages are dumped with camelCase aliases.
"""
from datetime import datetime, timezone
from typing import Annotated, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, Field, TypeAdapter

from tvqueue.models import Room, QueueItem
from tvqueue.models.room import camel_config


DeviceType = Literal["tv", "mobile"]


class ConnectedDevice(BaseModel):
    """A named participant announced when joining a room"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    type: DeviceType = "mobile"
    joined_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    model_config = camel_config


class WebSocketMessage(BaseModel):
    """Base WebSocket message schema"""
    type: str

    model_config = camel_config

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# ==================== CLIENT -> SERVER ====================

class JoinRoomMessage(WebSocketMessage):
    """Join the room with the given code"""
    type: Literal["join_room"]
    room_code: str
    device_name: str | None = None
    device_type: DeviceType | None = None


class PlayMessage(WebSocketMessage):
    type: Literal["play"]


class PauseMessage(WebSocketMessage):
    type: Literal["pause"]


class SkipSongMessage(WebSocketMessage):
    """Retire the current song; also sent by the TV when a video ends"""
    type: Literal["skip_song"]


class RemoveSongMessage(WebSocketMessage):
    type: Literal["remove_song"]
    song_id: str


ClientMessage = Annotated[
    Union[JoinRoomMessage, PlayMessage, PauseMessage, SkipSongMessage, RemoveSongMessage],
    Field(discriminator="type"),
]

client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


# ==================== SERVER -> CLIENT ====================

class RoomStateMessage(WebSocketMessage):
    """Snapshot sent to a connection right after it joins"""
    type: Literal["room_state"] = "room_state"
    room: Room
    queue: list[QueueItem]
    devices: list[ConnectedDevice] = []


class QueueUpdatedMessage(WebSocketMessage):
    type: Literal["queue_updated"] = "queue_updated"
    queue: list[QueueItem]


class SongAddedMessage(WebSocketMessage):
    type: Literal["song_added"] = "song_added"
    song: QueueItem


class SongRemovedMessage(WebSocketMessage):
    type: Literal["song_removed"] = "song_removed"
    song_id: str


class PlaybackStateMessage(WebSocketMessage):
    type: Literal["playback_state"] = "playback_state"
    is_playing: bool


class CurrentSongMessage(WebSocketMessage):
    """Now-playing pointer; all fields are null once the queue drains"""
    type: Literal["current_song"] = "current_song"
    video_id: str | None = None
    title: str | None = None
    thumbnail: str | None = None


class ErrorMessage(WebSocketMessage):
    type: Literal["error"] = "error"
    message: str


class DevicesUpdatedMessage(WebSocketMessage):
    type: Literal["devices_updated"] = "devices_updated"
    devices: list[ConnectedDevice]


class DeviceJoinedMessage(WebSocketMessage):
    type: Literal["device_joined"] = "device_joined"
    device: ConnectedDevice


class DeviceLeftMessage(WebSocketMessage):
    type: Literal["device_left"] = "device_left"
    device_id: str
    device_name: str


ServerMessage = Union[
    RoomStateMessage,
    QueueUpdatedMessage,
    SongAddedMessage,
    SongRemovedMessage,
    PlaybackStateMessage,
    CurrentSongMessage,
    ErrorMessage,
    DevicesUpdatedMessage,
    DeviceJoinedMessage,
    DeviceLeftMessage,
]
