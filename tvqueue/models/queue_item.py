from enum import Enum
from pydantic import BaseModel, Field
from datetime import datetime

from tvqueue.models.room import camel_config


class QueueItemStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"


class QueueItemBase(BaseModel):
    """External media reference shared by every queue item model"""
    video_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    thumbnail: str = Field(..., min_length=1)
    channel_title: str | None = None
    duration: str | None = None

    model_config = camel_config


class QueueItemCreate(QueueItemBase):
    """Model for inserting a queue item"""
    room_id: str
    position: int = Field(..., ge=1, description="Position in the queue")
    status: QueueItemStatus = QueueItemStatus.WAITING


class QueueItem(QueueItemCreate):
    """Complete queue item model from database"""
    id: str
    added_at: datetime | None = None

    @property
    def is_playing(self) -> bool:
        return self.status == QueueItemStatus.PLAYING
