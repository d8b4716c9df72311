"""
Search-related response schemas.
"""
from pydantic import BaseModel

from tvqueue.models.room import camel_config


class VideoSearchResult(BaseModel):
    """One candidate video returned by the search proxy"""
    video_id: str
    title: str
    thumbnail: str
    channel_title: str
    duration: str | None = None

    model_config = camel_config
