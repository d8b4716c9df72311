"""
API v1 routes for the TV queue server.
"""
from tvqueue.api.v1 import room, queue, search, websocket

__all__ = ["room", "queue", "search", "websocket"]
