# server/models/errors.py
"""Errors raised while handling client events.

Every one of these is recoverable: the event that caused it is rejected
and the room keeps running.
"""


class GameError(Exception):
    """Base class for rejected client events."""

    default_message = "Request rejected"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RoomNotFound(GameError):
    default_message = "Room does not exist!"


class RoomFull(GameError):
    default_message = "Room is full!"


class Unauthorized(GameError):
    default_message = "Only the host can do that!"


class InvalidInput(GameError):
    default_message = "Malformed event payload"


class StaleEvent(GameError):
    default_message = "Event timestamp outside the acceptance window"


class DuplicateRoomId(GameError):
    """Generated room id is already taken; retried internally."""

    default_message = "Room id already in use"
