from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime


# Accepts snake_case rows from the database, dumps camelCase for clients
camel_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    from_attributes=True,
)


class RoomBase(BaseModel):
    """Base room model with the playback pointer"""
    current_video_id: str | None = None
    current_video_title: str | None = None
    current_video_thumbnail: str | None = None
    is_playing: bool = False

    model_config = camel_config


class RoomCreate(RoomBase):
    """Model for inserting a new room"""
    code: str = Field(..., min_length=6, max_length=6)


class RoomUpdate(BaseModel):
    """Fields the state core is allowed to change on a room"""
    current_video_id: str | None = None
    current_video_title: str | None = None
    current_video_thumbnail: str | None = None
    is_playing: bool | None = None


class Room(RoomBase):
    """Complete room model from database"""
    id: str
    code: str
    created_at: datetime | None = None
