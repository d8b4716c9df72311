"""
Room-related response schemas for API endpoints.
"""
from pydantic import BaseModel

from tvqueue.models import Room, QueueItem
from tvqueue.models.room import camel_config


# ==================== RESPONSE SCHEMAS ====================

class RoomResponse(Room):
    """Response schema for room data"""
    pass


class RoomWithQueueResponse(BaseModel):
    """Response schema for fetching a room by code"""
    room: Room
    queue: list[QueueItem]

    model_config = camel_config
