from dataclasses import dataclass

from fastapi import WebSocket
from pydantic import ValidationError

from tvqueue.core.exceptions import NotFoundError, ProtocolError
from tvqueue.core.logging import get_logger
from tvqueue.schemas.websocket import (
    ClientMessage,
    ConnectedDevice,
    DeviceLeftMessage,
    DevicesUpdatedMessage,
    ErrorMessage,
    JoinRoomMessage,
    PauseMessage,
    PlayMessage,
    RemoveSongMessage,
    SkipSongMessage,
    client_message_adapter,
)
from tvqueue.services.room_service import RoomService
from tvqueue.services.websocket_manager import ConnectionRegistry

logger = get_logger("SyncProtocolHandler")


@dataclass
class ClientSession:
    """Per-connection state: the socket and the room it joined, if any"""
    websocket: WebSocket
    room_id: str | None = None
    room_code: str | None = None


class SyncProtocolHandler:
    """
    Entry point for every real-time client intent.

    Parses the message, checks it against the connection's session, calls the
    room service and lets it broadcast the resulting events. Failures are
    reported to the sender as `error` messages; they never close the
    connection.
    """

    def __init__(self, room_service: RoomService, registry: ConnectionRegistry):
        self.room_service = room_service
        self.registry = registry

    def parse_message(self, raw: str) -> ClientMessage:
        """
        Raises:
            ProtocolError: invalid JSON, missing or unknown `type`, bad fields
        """
        try:
            return client_message_adapter.validate_json(raw)
        except ValidationError as e:
            raise ProtocolError("Invalid message format") from e

    async def handle_message(self, session: ClientSession, raw: str) -> None:
        try:
            message = self.parse_message(raw)
            await self.dispatch(session, message)
        except ProtocolError as e:
            logger.warning(f"Rejected message from client in room {session.room_code}: {raw[:200]!r}")
            await self._send_error(session, e.message)
        except NotFoundError as e:
            await self._send_error(session, e.message)
        except Exception as e:
            logger.error(f"Error handling message in room {session.room_code}: {e}", exc_info=True)
            await self._send_error(session, "Internal server error")

    async def dispatch(self, session: ClientSession, message: ClientMessage) -> None:
        if isinstance(message, JoinRoomMessage):
            await self.join_room(session, message)
            return

        if session.room_id is None:
            # Intents from connections that never joined are ignored
            logger.debug(f"Ignoring {message.type} from connection without a room")
            return

        if isinstance(message, PlayMessage):
            await self.room_service.set_playing(session.room_id, True)
        elif isinstance(message, PauseMessage):
            await self.room_service.set_playing(session.room_id, False)
        elif isinstance(message, SkipSongMessage):
            await self.room_service.advance(session.room_id)
        elif isinstance(message, RemoveSongMessage):
            await self.room_service.remove_from_queue(session.room_id, message.song_id)
        else:
            raise ProtocolError("Invalid message format")

    async def join_room(self, session: ClientSession, message: JoinRoomMessage) -> None:
        room = await self.room_service.get_room_by_code(message.room_code)

        # Leave the old room before the new snapshot is read
        if session.room_id is not None and session.room_id != room.id:
            await self.handle_disconnect(session)

        device = None
        if message.device_name:
            device = ConnectedDevice(name=message.device_name, type=message.device_type or "mobile")

        room = await self.room_service.join_room(room.id, session.websocket, device)
        session.room_id = room.id
        session.room_code = room.code

        logger.info(
            f"Client {device.name if device else 'anonymous'} joined room {room.code} - "
            f"{self.registry.get_room_connection_count(room.id)} connected"
        )

    async def handle_disconnect(self, session: ClientSession) -> None:
        """Unregister the connection; only named devices are announced to peers"""
        room_id, device = self.registry.leave(session.websocket)
        room_code = session.room_code
        session.room_id = None
        session.room_code = None

        if room_id is None:
            return

        logger.info(
            f"Client {device.name if device else 'anonymous'} left room {room_code} - "
            f"{self.registry.get_room_connection_count(room_id)} remaining"
        )

        if device is not None:
            await self.registry.broadcast(room_id, DeviceLeftMessage(device_id=device.id, device_name=device.name))
            await self.registry.broadcast(room_id, DevicesUpdatedMessage(devices=self.registry.get_devices(room_id)))

    async def _send_error(self, session: ClientSession, message: str) -> None:
        await self.registry.send_personal_message(session.websocket, ErrorMessage(message=message))
