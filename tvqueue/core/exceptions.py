"""
Domain errors raised by the room/queue core and the search proxy.

HTTP routes translate these into HTTPException responses; the WebSocket
protocol handler turns them into `error` messages for the sender.
"""


class TvQueueError(Exception):
    """Base class for expected, recoverable failures"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TvQueueError):
    """A room or queue item referenced by id or code does not exist"""


class PayloadValidationError(TvQueueError):
    """A mutation payload is missing required fields"""

    def __init__(self, fields: list[str], message: str = "Missing required fields"):
        super().__init__(message)
        self.fields = fields


class UpstreamError(TvQueueError):
    """The search provider failed, is unreachable or is not configured"""


class ProtocolError(TvQueueError):
    """A real-time message could not be parsed or has an unknown type"""
