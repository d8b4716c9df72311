import asyncio
import secrets
import weakref
from typing import List, Optional, Tuple

from fastapi import WebSocket

from tvqueue.core.exceptions import NotFoundError
from tvqueue.core.logging import get_logger
from tvqueue.models import (
    QueueItem,
    QueueItemBase,
    QueueItemCreate,
    QueueItemStatus,
    Room,
    RoomCreate,
)
from tvqueue.schemas.websocket import (
    ConnectedDevice,
    CurrentSongMessage,
    DeviceJoinedMessage,
    DevicesUpdatedMessage,
    PlaybackStateMessage,
    QueueUpdatedMessage,
    RoomStateMessage,
    SongAddedMessage,
    SongRemovedMessage,
)
from tvqueue.services.supabase_service import SupabaseService
from tvqueue.services.websocket_manager import ConnectionRegistry
from tvqueue.utils.formatters import normalize_room_code

logger = get_logger("RoomService")

# Uppercase letters and digits without I, O, 0 and 1
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """Generate a random room code"""
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


class RoomService:
    """
    Authority for every transition of a room's playback pointer and queue.

    Persisted rows are the source of truth. Each mutation runs under a lock
    owned by its room, because awaiting the database lets other intents for
    the same room run in between; two skips must never promote the same item.
    Broadcasts are sent while the lock is held so clients observe events in
    mutation order.
    """

    def __init__(self, storage: SupabaseService, registry: ConnectionRegistry):
        self.storage = storage
        self.registry = registry
        self._room_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def room_lock(self, room_id: str) -> asyncio.Lock:
        """Lock serializing mutations of one room; dropped once nobody holds it"""
        lock = self._room_locks.get(room_id)
        if lock is None:
            lock = asyncio.Lock()
            self._room_locks[room_id] = lock
        return lock

    # ==================== ROOMS ====================

    async def create_room(self) -> Room:
        """Create an empty room under a fresh unique code"""
        code = generate_room_code()
        while await self.storage.get_room_by_code(code) is not None:
            logger.debug(f"Room code collision on {code}, drawing again")
            code = generate_room_code()

        room = await self.storage.create_room(RoomCreate(code=code))
        logger.info(f"Room created: {room.code} ({room.id})")
        return room

    async def get_room_by_code(self, code: str) -> Room:
        """
        Resolve a room from a hand-entered code.

        Raises:
            NotFoundError: no room holds the code
        """
        room = await self.storage.get_room_by_code(normalize_room_code(code))
        if room is None:
            raise NotFoundError("Room not found")
        return room

    async def get_room_snapshot(self, code: str) -> Tuple[Room, List[QueueItem]]:
        room = await self.get_room_by_code(code)
        queue = await self.storage.get_queue(room.id)
        return room, queue

    async def join_room(
        self,
        room_id: str,
        websocket: WebSocket,
        device: Optional[ConnectedDevice] = None,
    ) -> Room:
        """
        Subscribe a connection to a room and send it the room state.

        The snapshot is read, the connection registered and the state sent
        under the room lock, so no mutation falls between the snapshot the
        joiner sees and the first broadcast it receives.

        Raises:
            NotFoundError: the room does not exist
        """
        async with self.room_lock(room_id):
            room = await self.storage.get_room(room_id)
            if room is None:
                raise NotFoundError("Room not found")
            queue = await self.storage.get_queue(room_id)

            self.registry.join(room_id, websocket, device)
            devices = self.registry.get_devices(room_id)
            await self.registry.send_personal_message(
                websocket,
                RoomStateMessage(room=room, queue=queue, devices=devices),
            )

            if device is not None:
                await self.registry.broadcast(room_id, DeviceJoinedMessage(device=device), exclude=websocket)
                await self.registry.broadcast(room_id, DevicesUpdatedMessage(devices=devices))

            return room

    # ==================== QUEUE ====================

    async def add_to_queue(self, room_id: str, item: QueueItemBase) -> QueueItem:
        """
        Append a song to a room's queue.

        The first song of an empty queue starts playing immediately.

        Raises:
            NotFoundError: the room does not exist
        """
        async with self.room_lock(room_id):
            room = await self.storage.get_room(room_id)
            if room is None:
                raise NotFoundError("Room not found")

            max_position = await self.storage.get_max_position(room_id)
            queue_was_empty = max_position == 0

            queue_item = await self.storage.add_queue_item(
                QueueItemCreate(
                    **item.model_dump(),
                    room_id=room_id,
                    position=max_position + 1,
                    status=QueueItemStatus.PLAYING if queue_was_empty else QueueItemStatus.WAITING,
                )
            )
            logger.info(f"Added '{queue_item.title}' to room {room.code} at position {queue_item.position}")

            if queue_was_empty:
                await self._set_current(room_id, queue_item)
                await self.registry.broadcast(room_id, current_song_message(queue_item))
                await self.registry.broadcast(room_id, PlaybackStateMessage(is_playing=True))

            await self.registry.broadcast(room_id, SongAddedMessage(song=queue_item))
            await self._broadcast_queue(room_id)

            return queue_item

    async def remove_from_queue(self, room_id: str, item_id: str) -> None:
        """
        Remove an item from a room's queue.

        Removing the playing item promotes the next waiting one, or clears
        playback when none is left.

        Raises:
            NotFoundError: the item does not belong to the room
        """
        async with self.room_lock(room_id):
            item = await self.storage.get_queue_item(room_id, item_id)
            if item is None:
                raise NotFoundError("Queue item not found")

            await self.storage.remove_queue_item(item.id)
            logger.info(f"Removed '{item.title}' from room {room_id}")

            if item.is_playing:
                next_item = await self._promote_next(room_id)
                await self.registry.broadcast(room_id, current_song_message(next_item))
                await self.registry.broadcast(room_id, PlaybackStateMessage(is_playing=next_item is not None))

            await self.registry.broadcast(room_id, SongRemovedMessage(song_id=item.id))
            await self._broadcast_queue(room_id)

    # ==================== PLAYBACK ====================

    async def set_playing(self, room_id: str, playing: bool) -> Optional[Room]:
        """
        Set the play/pause flag.

        Unknown rooms are ignored: late messages from clients of a room that
        no longer resolves are not an error.
        """
        async with self.room_lock(room_id):
            room = await self.storage.update_room(room_id, is_playing=playing)
            if room is None:
                logger.debug(f"Ignoring playback change for unknown room {room_id}")
                return None

            logger.info(f"Room {room.code} {'playing' if playing else 'paused'}")
            await self.registry.broadcast(room_id, PlaybackStateMessage(is_playing=playing))
            return room

    async def advance(self, room_id: str) -> Optional[Room]:
        """
        Retire the playing item and promote the next waiting one.

        Used for explicit skips and when the TV reports the end of a video.
        Unknown rooms are ignored.
        """
        async with self.room_lock(room_id):
            room = await self.storage.get_room(room_id)
            if room is None:
                logger.debug(f"Ignoring skip for unknown room {room_id}")
                return None

            # Normally one row; stale extras from an earlier failure go too
            for playing_item in await self.storage.get_playing_items(room_id):
                await self.storage.remove_queue_item(playing_item.id)

            next_item = await self._promote_next(room_id)

            await self.registry.broadcast(room_id, current_song_message(next_item))
            await self._broadcast_queue(room_id)
            await self.registry.broadcast(room_id, PlaybackStateMessage(is_playing=next_item is not None))

            return await self.storage.get_room(room_id)

    # ==================== PRIVATE METHODS ====================

    async def _promote_next(self, room_id: str) -> Optional[QueueItem]:
        """Mark the next waiting item as playing, or clear the room when there is none"""
        next_item = await self.storage.get_next_in_queue(room_id)

        if next_item is None:
            logger.info(f"Queue drained for room {room_id}")
            await self._set_current(room_id, None)
            return None

        await self.storage.update_queue_item(next_item.id, status=QueueItemStatus.PLAYING)
        next_item.status = QueueItemStatus.PLAYING
        await self._set_current(room_id, next_item)
        logger.info(f"Room {room_id} now playing '{next_item.title}'")
        return next_item

    async def _set_current(self, room_id: str, item: Optional[QueueItem]) -> Optional[Room]:
        """Mirror the playing item into the room row"""
        if item is None:
            return await self.storage.update_room(
                room_id,
                current_video_id=None,
                current_video_title=None,
                current_video_thumbnail=None,
                is_playing=False,
            )
        return await self.storage.update_room(
            room_id,
            current_video_id=item.video_id,
            current_video_title=item.title,
            current_video_thumbnail=item.thumbnail,
            is_playing=True,
        )

    async def _broadcast_queue(self, room_id: str) -> None:
        queue = await self.storage.get_queue(room_id)
        await self.registry.broadcast(room_id, QueueUpdatedMessage(queue=queue))


def current_song_message(item: Optional[QueueItem]) -> CurrentSongMessage:
    if item is None:
        return CurrentSongMessage()
    return CurrentSongMessage(video_id=item.video_id, title=item.title, thumbnail=item.thumbnail)
