from __future__ import annotations

from typing import Optional


class GameError(Exception):
    """
    Base class for every error a game operation reports back to its caller.

    The message is what the client sees in the error envelope.
    """

    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingField(GameError):
    default_message = "Missing field"


class MalformedRequest(GameError):
    default_message = "Malformed JSON"


class NicknameTaken(GameError):
    default_message = "Nickname taken"


class AlreadyJoined(GameError):
    default_message = "Already joined"


class InvalidToken(GameError):
    default_message = "Invalid token"


class InvalidCredentials(GameError):
    default_message = "Invalid nickname or password"


class MissingRoomId(GameError):
    default_message = "Room id missing"


class InvalidRoomId(GameError):
    default_message = "Invalid room id"


class NotAPlayer(GameError):
    default_message = "Not a player in this room"


class InternalCollision(GameError):
    # Two fresh tokens hashing to the same value.
    default_message = "Internal server error"


class PersistenceError(Exception):
    """Raised when a user record cannot be written to or read from storage."""
