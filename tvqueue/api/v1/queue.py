from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from tvqueue.core.exceptions import NotFoundError, PayloadValidationError
from tvqueue.core.logging import get_logger
from tvqueue.dependencies import get_room_service
from tvqueue.models import QueueItem
from tvqueue.schemas.queue import AddToQueueRequest, RemoveFromQueueResponse
from tvqueue.services.room_service import RoomService

logger = get_logger("api.queue")
router = APIRouter()


def parse_add_request(payload: dict | None) -> AddToQueueRequest:
    """
    Raises:
        PayloadValidationError: listing every missing or empty field
    """
    try:
        return AddToQueueRequest.model_validate(payload or {})
    except ValidationError as e:
        fields = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        raise PayloadValidationError(fields) from e


@router.post("/{code}/queue", response_model=QueueItem)
async def add_to_queue(
    code: str,
    payload: dict | None = Body(default=None),
    room_service: RoomService = Depends(get_room_service),
):
    """Add a search result to the room's queue"""
    try:
        room = await room_service.get_room_by_code(code)
        request = parse_add_request(payload)
        return await room_service.add_to_queue(room.id, request)
    except NotFoundError as e:
        logger.warning(f"Add to queue failed for room {code}: {e.message}")
        raise HTTPException(status_code=404, detail=e.message)
    except PayloadValidationError as e:
        logger.warning(f"Rejected queue item for room {code}: missing {e.fields}")
        raise HTTPException(status_code=400, detail={"message": e.message, "fields": e.fields})
    except Exception as e:
        logger.error(f"Failed to add to queue in room {code}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to add to queue")


@router.delete("/{code}/queue/{item_id}", response_model=RemoveFromQueueResponse)
async def remove_from_queue(
    code: str,
    item_id: str,
    room_service: RoomService = Depends(get_room_service),
):
    """Remove an item from the room's queue"""
    try:
        room = await room_service.get_room_by_code(code)
        await room_service.remove_from_queue(room.id, item_id)
        return {"success": True}
    except NotFoundError as e:
        logger.warning(f"Remove from queue failed for room {code}: {e.message}")
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to remove {item_id} from room {code}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to remove from queue")
