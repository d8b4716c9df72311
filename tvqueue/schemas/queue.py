"""
Queue-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel

from tvqueue.models import QueueItemBase


# ==================== REQUEST SCHEMAS ====================

class AddToQueueRequest(QueueItemBase):
    """Request schema for adding a search result to a room's queue"""
    pass


# ==================== RESPONSE SCHEMAS ====================

class RemoveFromQueueResponse(BaseModel):
    """Response schema for removing a queue item"""
    success: bool = True
