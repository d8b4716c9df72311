from supabase import acreate_client, AsyncClient

from tvqueue.core.logging import get_logger
from tvqueue.models import QueueItem, QueueItemCreate, QueueItemStatus, Room, RoomCreate, RoomUpdate

logger = get_logger("SupabaseService")

ROOMS_TABLE = "rooms"
QUEUE_ITEMS_TABLE = "queue_items"


class SupabaseService:
    """
    Create/read/update/delete mapper over the `rooms` and `queue_items` tables.

    Holds no playback logic: the room service decides what to write and in
    which order. The async client is created lazily on first use.
    """

    ROOM_UPDATE_FIELDS = set(RoomUpdate.model_fields)
    QUEUE_ITEM_UPDATE_FIELDS = {"status"}

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._client: AsyncClient | None = None

    async def get_client(self) -> AsyncClient:
        if self._client is None:
            logger.debug("Creating Supabase client")
            self._client = await acreate_client(self.url, self.key)
        return self._client

    # ==================== ROOM OPERATIONS ====================

    async def create_room(self, room: RoomCreate) -> Room:
        client = await self.get_client()
        result = await client.table(ROOMS_TABLE).insert(room.model_dump()).execute()
        return Room.model_validate(result.data[0])

    async def get_room_by_code(self, code: str) -> Room | None:
        client = await self.get_client()
        result = await client.table(ROOMS_TABLE).select("*").eq("code", code).limit(1).execute()
        return Room.model_validate(result.data[0]) if result.data else None

    async def get_room(self, room_id: str) -> Room | None:
        client = await self.get_client()
        result = await client.table(ROOMS_TABLE).select("*").eq("id", room_id).limit(1).execute()
        return Room.model_validate(result.data[0]) if result.data else None

    async def update_room(self, room_id: str, **fields) -> Room | None:
        """
        Update room fields.

        Args:
            room_id: Room ID
            **fields: Any of current_video_id, current_video_title,
                      current_video_thumbnail, is_playing (None clears a field)
        """
        data = {k: v for k, v in fields.items() if k in self.ROOM_UPDATE_FIELDS}
        if not data:
            raise ValueError("No valid fields provided for update")

        client = await self.get_client()
        result = await client.table(ROOMS_TABLE).update(data).eq("id", room_id).execute()
        return Room.model_validate(result.data[0]) if result.data else None

    # ==================== QUEUE OPERATIONS ====================

    async def add_queue_item(self, item: QueueItemCreate) -> QueueItem:
        client = await self.get_client()
        result = await client.table(QUEUE_ITEMS_TABLE).insert(item.model_dump(mode="json")).execute()
        return QueueItem.model_validate(result.data[0])

    async def get_queue(self, room_id: str) -> list[QueueItem]:
        """Get every queue item of a room, ordered by position"""
        client = await self.get_client()
        result = (
            await client.table(QUEUE_ITEMS_TABLE)
            .select("*")
            .eq("room_id", room_id)
            .order("position")
            .execute()
        )
        return [QueueItem.model_validate(row) for row in result.data]

    async def get_queue_item(self, room_id: str, item_id: str) -> QueueItem | None:
        """Get a queue item, only if it belongs to the given room"""
        client = await self.get_client()
        result = (
            await client.table(QUEUE_ITEMS_TABLE)
            .select("*")
            .eq("id", item_id)
            .eq("room_id", room_id)
            .limit(1)
            .execute()
        )
        return QueueItem.model_validate(result.data[0]) if result.data else None

    async def get_playing_items(self, room_id: str) -> list[QueueItem]:
        client = await self.get_client()
        result = (
            await client.table(QUEUE_ITEMS_TABLE)
            .select("*")
            .eq("room_id", room_id)
            .eq("status", QueueItemStatus.PLAYING.value)
            .execute()
        )
        return [QueueItem.model_validate(row) for row in result.data]

    async def get_next_in_queue(self, room_id: str) -> QueueItem | None:
        """Get the waiting item with the lowest position"""
        client = await self.get_client()
        result = (
            await client.table(QUEUE_ITEMS_TABLE)
            .select("*")
            .eq("room_id", room_id)
            .eq("status", QueueItemStatus.WAITING.value)
            .order("position")
            .limit(1)
            .execute()
        )
        return QueueItem.model_validate(result.data[0]) if result.data else None

    async def get_max_position(self, room_id: str) -> int:
        """Highest position currently used in the room, 0 when the queue is empty"""
        client = await self.get_client()
        result = (
            await client.table(QUEUE_ITEMS_TABLE)
            .select("position")
            .eq("room_id", room_id)
            .order("position", desc=True)
            .limit(1)
            .execute()
        )
        if result.data:
            return result.data[0]["position"]
        return 0

    async def update_queue_item(self, item_id: str, **fields) -> QueueItem | None:
        data = {k: v for k, v in fields.items() if k in self.QUEUE_ITEM_UPDATE_FIELDS}
        if not data:
            raise ValueError("No valid fields provided for update")
        if isinstance(data.get("status"), QueueItemStatus):
            data["status"] = data["status"].value

        client = await self.get_client()
        result = await client.table(QUEUE_ITEMS_TABLE).update(data).eq("id", item_id).execute()
        return QueueItem.model_validate(result.data[0]) if result.data else None

    async def remove_queue_item(self, item_id: str) -> None:
        client = await self.get_client()
        await client.table(QUEUE_ITEMS_TABLE).delete().eq("id", item_id).execute()
