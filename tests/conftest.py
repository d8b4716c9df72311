"""Shared fixtures: in-memory persistence, fake sockets and wired services."""

import asyncio
import json
import os
from datetime import datetime, timezone
from uuid import uuid4

import pytest
from starlette.websockets import WebSocketState

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("ENVIRONMENT", "development")

from tvqueue.models import QueueItem, QueueItemCreate, QueueItemStatus, Room, RoomCreate  # noqa: E402
from tvqueue.services.room_service import RoomService  # noqa: E402
from tvqueue.services.sync_handler import ClientSession, SyncProtocolHandler  # noqa: E402
from tvqueue.services.websocket_manager import ConnectionRegistry  # noqa: E402


class InMemoryStorage:
    """
    Drop-in for SupabaseService backed by dicts.

    Every call yields to the event loop once, like a real database round
    trip, so concurrent room operations interleave.
    """

    def __init__(self):
        self.rooms: dict[str, dict] = {}
        self.queue_items: dict[str, dict] = {}

    async def create_room(self, room: RoomCreate) -> Room:
        await asyncio.sleep(0)
        if any(row["code"] == room.code for row in self.rooms.values()):
            raise ValueError(f"duplicate room code {room.code}")
        row = {**room.model_dump(), "id": str(uuid4()), "created_at": datetime.now(timezone.utc)}
        self.rooms[row["id"]] = row
        return Room.model_validate(row)

    async def get_room_by_code(self, code: str) -> Room | None:
        await asyncio.sleep(0)
        for row in self.rooms.values():
            if row["code"] == code:
                return Room.model_validate(row)
        return None

    async def get_room(self, room_id: str) -> Room | None:
        await asyncio.sleep(0)
        row = self.rooms.get(room_id)
        return Room.model_validate(row) if row else None

    async def update_room(self, room_id: str, **fields) -> Room | None:
        await asyncio.sleep(0)
        row = self.rooms.get(room_id)
        if row is None:
            return None
        row.update(fields)
        return Room.model_validate(row)

    async def add_queue_item(self, item: QueueItemCreate) -> QueueItem:
        await asyncio.sleep(0)
        row = {**item.model_dump(mode="json"), "id": str(uuid4()), "added_at": datetime.now(timezone.utc)}
        self.queue_items[row["id"]] = row
        return QueueItem.model_validate(row)

    def _room_rows(self, room_id: str) -> list[dict]:
        rows = [row for row in self.queue_items.values() if row["room_id"] == room_id]
        return sorted(rows, key=lambda row: row["position"])

    async def get_queue(self, room_id: str) -> list[QueueItem]:
        await asyncio.sleep(0)
        return [QueueItem.model_validate(row) for row in self._room_rows(room_id)]

    async def get_queue_item(self, room_id: str, item_id: str) -> QueueItem | None:
        await asyncio.sleep(0)
        row = self.queue_items.get(item_id)
        if row is None or row["room_id"] != room_id:
            return None
        return QueueItem.model_validate(row)

    async def get_playing_items(self, room_id: str) -> list[QueueItem]:
        await asyncio.sleep(0)
        return [
            QueueItem.model_validate(row)
            for row in self._room_rows(room_id)
            if row["status"] == QueueItemStatus.PLAYING.value
        ]

    async def get_next_in_queue(self, room_id: str) -> QueueItem | None:
        await asyncio.sleep(0)
        for row in self._room_rows(room_id):
            if row["status"] == QueueItemStatus.WAITING.value:
                return QueueItem.model_validate(row)
        return None

    async def get_max_position(self, room_id: str) -> int:
        await asyncio.sleep(0)
        return max((row["position"] for row in self._room_rows(room_id)), default=0)

    async def update_queue_item(self, item_id: str, **fields) -> QueueItem | None:
        await asyncio.sleep(0)
        row = self.queue_items.get(item_id)
        if row is None:
            return None
        if isinstance(fields.get("status"), QueueItemStatus):
            fields["status"] = fields["status"].value
        row.update(fields)
        return QueueItem.model_validate(row)

    async def remove_queue_item(self, item_id: str) -> None:
        await asyncio.sleep(0)
        self.queue_items.pop(item_id, None)


class FakeWebSocket:
    """Records text frames; can be closed or made to fail on send."""

    def __init__(self, fail_on_send: bool = False):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail_on_send = fail_on_send
        self.sent: list[str] = []

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise RuntimeError("Connection closed")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.client_state = WebSocketState.DISCONNECTED
        self.application_state = WebSocketState.DISCONNECTED

    @property
    def messages(self) -> list[dict]:
        return [json.loads(frame) for frame in self.sent]

    def types(self) -> list[str]:
        return [message["type"] for message in self.messages]

    def of_type(self, message_type: str) -> list[dict]:
        return [message for message in self.messages if message["type"] == message_type]

    def clear(self) -> None:
        self.sent.clear()


def song(video_id: str, title: str | None = None, **extra) -> dict:
    """Add-to-queue payload as the mobile client sends it"""
    return {
        "videoId": video_id,
        "title": title or f"Song {video_id}",
        "thumbnail": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg",
        **extra,
    }


async def assert_room_invariants(storage: InMemoryStorage, room_id: str) -> None:
    """At most one playing item, mirrored exactly by the room's pointer."""
    room = await storage.get_room(room_id)
    playing = await storage.get_playing_items(room_id)

    assert len(playing) <= 1
    if playing:
        assert room.current_video_id == playing[0].video_id
    else:
        assert room.current_video_id is None


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def room_service(storage, registry):
    return RoomService(storage, registry)


@pytest.fixture
def handler(room_service, registry):
    return SyncProtocolHandler(room_service, registry)


@pytest.fixture
def make_session():
    def _make(websocket: FakeWebSocket | None = None) -> ClientSession:
        return ClientSession(websocket=websocket or FakeWebSocket())
    return _make
