"""
Database models for the TV queue server.
These Pydantic models map to the `rooms` and `queue_items` tables.
"""

from .room import (
    Room,
    RoomBase,
    RoomCreate,
    RoomUpdate,
)
from .queue_item import (
    QueueItem,
    QueueItemBase,
    QueueItemCreate,
    QueueItemStatus,
)

__all__ = [
    # Room models
    "Room",
    "RoomBase",
    "RoomCreate",
    "RoomUpdate",
    # Queue item models
    "QueueItem",
    "QueueItemBase",
    "QueueItemCreate",
    "QueueItemStatus",
]
