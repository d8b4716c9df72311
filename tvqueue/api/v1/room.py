from fastapi import APIRouter, Depends, HTTPException
from tvqueue.core.exceptions import NotFoundError
from tvqueue.core.logging import get_logger
from tvqueue.dependencies import get_room_service
from tvqueue.schemas.room import RoomResponse, RoomWithQueueResponse
from tvqueue.services.room_service import RoomService

logger = get_logger("api.room")
router = APIRouter()


@router.post("", response_model=RoomResponse)
async def create_room(room_service: RoomService = Depends(get_room_service)):
    """Create a new room with an empty queue"""
    try:
        return await room_service.create_room()
    except Exception as e:
        logger.error(f"Failed to create room: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create room")


@router.get("/{code}", response_model=RoomWithQueueResponse)
async def get_room(code: str, room_service: RoomService = Depends(get_room_service)):
    """Get a room and its ordered queue; the code is case-insensitive"""
    logger.debug(f"Fetching room: {code}")
    try:
        room, queue = await room_service.get_room_snapshot(code)
        return {"room": room, "queue": queue}
    except NotFoundError as e:
        logger.warning(f"Room not found: {code}")
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to fetch room {code}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch room")
