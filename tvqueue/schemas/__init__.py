"""
API request and response schemas (DTOs).
Separate from database models - these are for API endpoints and the
WebSocket channel.
"""

from .room import (
    RoomResponse,
    RoomWithQueueResponse,
)
from .queue import (
    AddToQueueRequest,
    RemoveFromQueueResponse,
)
from .search import (
    VideoSearchResult,
)
from .websocket import (
    ConnectedDevice,
    WebSocketMessage,
    ClientMessage,
    client_message_adapter,
    JoinRoomMessage,
    PlayMessage,
    PauseMessage,
    SkipSongMessage,
    RemoveSongMessage,
    ServerMessage,
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
)

__all__ = [
    # Room schemas
    "RoomResponse",
    "RoomWithQueueResponse",
    # Queue schemas
    "AddToQueueRequest",
    "RemoveFromQueueResponse",
    # Search schemas
    "VideoSearchResult",
    # WebSocket schemas
    "ConnectedDevice",
    "WebSocketMessage",
    "ClientMessage",
    "client_message_adapter",
    "JoinRoomMessage",
    "PlayMessage",
    "PauseMessage",
    "SkipSongMessage",
    "RemoveSongMessage",
    "ServerMessage",
    "RoomStateMessage",
    "QueueUpdatedMessage",
    "SongAddedMessage",
    "SongRemovedMessage",
    "PlaybackStateMessage",
    "CurrentSongMessage",
    "ErrorMessage",
    "DevicesUpdatedMessage",
    "DeviceJoinedMessage",
    "DeviceLeftMessage",
]
