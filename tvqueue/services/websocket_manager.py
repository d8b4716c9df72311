from typing import Dict, List, Set, Tuple
from fastapi import WebSocket
from starlette.websockets import WebSocketState
from tvqueue.core.logging import get_logger
from tvqueue.schemas.websocket import ConnectedDevice, ServerMessage

logger = get_logger("ConnectionRegistry")


def is_open(websocket: WebSocket) -> bool:
    """True while both sides of the socket are still connected"""
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class ConnectionRegistry:
    """
    Tracks which live WebSocket connections are joined to which room and
    delivers messages to them.

    Runs on the event loop only, so no locking is needed. Contents are
    volatile: clients rejoin after a reconnect.
    """

    def __init__(self):
        # room_id -> set of WebSocket connections
        self.active_connections: Dict[str, Set[WebSocket]] = {}
        self._room_by_connection: Dict[WebSocket, str] = {}
        self._devices: Dict[WebSocket, ConnectedDevice] = {}

    def join(self, room_id: str, websocket: WebSocket, device: ConnectedDevice | None = None):
        """
        Subscribe a connection to a room.

        A connection belongs to at most one room; joining another room moves it.

        Args:
            room_id: Room ID to join
            websocket: Accepted WebSocket connection
            device: Named device announced by the client, if any
        """
        previous_room_id = self._room_by_connection.get(websocket)
        if previous_room_id is not None and previous_room_id != room_id:
            self.leave(websocket)

        self.active_connections.setdefault(room_id, set()).add(websocket)
        self._room_by_connection[websocket] = room_id

        if device is not None:
            self._devices[websocket] = device

    def leave(self, websocket: WebSocket) -> Tuple[str | None, ConnectedDevice | None]:
        """
        Remove a connection from whichever room holds it.

        Returns:
            (room_id, device) the connection was registered with; both None
            when it had not joined a room
        """
        room_id = self._room_by_connection.pop(websocket, None)
        device = self._devices.pop(websocket, None)

        if room_id is not None and room_id in self.active_connections:
            self.active_connections[room_id].discard(websocket)

            # Clean up empty room
            if not self.active_connections[room_id]:
                del self.active_connections[room_id]

        return room_id, device

    async def broadcast(self, room_id: str, message: ServerMessage, exclude: WebSocket | None = None):
        """
        Send a message to every open connection joined to a room.

        The message is serialized once. Closed connections are skipped.
        Connections whose send fails stop receiving room messages, but keep
        their room and device until `leave` so the departure can be announced.

        Args:
            room_id: Room ID to broadcast to
            message: Server message
            exclude: Connection that should not receive the message
        """
        connections = self.active_connections.get(room_id)
        if not connections:
            return

        json_message = message.to_json()

        failed = []
        for connection in list(connections):
            if connection is exclude or not is_open(connection):
                continue
            try:
                await connection.send_text(json_message)
            except Exception as e:
                logger.warning(f"Failed to send {message.type} to client in room {room_id}: {e}")
                failed.append(connection)

        for connection in failed:
            connections.discard(connection)
        if not connections and self.active_connections.get(room_id) is connections:
            del self.active_connections[room_id]

    async def send_personal_message(self, websocket: WebSocket, message: ServerMessage):
        """
        Send a message to a single connection.

        Args:
            websocket: WebSocket connection
            message: Server message
        """
        if not is_open(websocket):
            logger.debug(f"Skipping {message.type} to closed connection")
            return
        try:
            await websocket.send_text(message.to_json())
        except Exception as e:
            logger.warning(f"Failed to send {message.type} message: {e}")

    def room_of(self, websocket: WebSocket) -> str | None:
        return self._room_by_connection.get(websocket)

    def get_devices(self, room_id: str) -> List[ConnectedDevice]:
        """Named devices currently joined to a room, oldest first"""
        devices = [
            device
            for connection, device in self._devices.items()
            if self._room_by_connection.get(connection) == room_id
        ]
        return sorted(devices, key=lambda device: device.joined_at)

    def get_room_connection_count(self, room_id: str) -> int:
        """
        Get number of active connections in a room.

        Args:
            room_id: Room ID

        Returns:
            Number of connections
        """
        return len(self.active_connections.get(room_id, ()))

    def all_connections(self) -> List[WebSocket]:
        return list(self._room_by_connection)
