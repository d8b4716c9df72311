from fastapi import APIRouter, Depends, WebSocket
from tvqueue.core.logging import get_logger
from tvqueue.dependencies import get_sync_handler
from tvqueue.services.sync_handler import ClientSession, SyncProtocolHandler

logger = get_logger("api.websocket")
router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    handler: SyncProtocolHandler = Depends(get_sync_handler),
):
    """
    Real-time channel shared by the TV and mobile clients.

    Clients send `join_room` first, then playback intents (`play`, `pause`,
    `skip_song`, `remove_song`). The server pushes room state, queue and
    playback changes to every connection joined to the same room.
    """
    await websocket.accept()
    session = ClientSession(websocket=websocket)
    logger.debug("WebSocket connection accepted")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug(f"WebSocket disconnected from room {session.room_code}")
                break

            # Binary frames go through the same parser and fail as malformed
            data = message.get("text")
            if data is None:
                data = (message.get("bytes") or b"").decode("utf-8", errors="replace")

            await handler.handle_message(session, data)
    except Exception as e:
        logger.error(f"WebSocket error in room {session.room_code}: {e}", exc_info=True)
    finally:
        await handler.handle_disconnect(session)
