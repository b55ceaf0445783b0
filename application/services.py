from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Optional

from domain.errors import GameError

from .identity import IdentityStore
from .rooms import RoomRegistry


@dataclass
class OperationResult:
    """Generic result type for every game operation."""

    success: bool
    error_message: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_envelope(self) -> Dict[str, Any]:
        """
        Shape the result the way clients receive it.

        Failures become `{"success": false, "exception": {"message": ...}}`;
        successes are the payload itself.
        """

        if not self.success:
            return {"success": False, "exception": {"message": self.error_message}}
        return dict(self.payload)


def _run(operation: Callable[[], Dict[str, Any]]) -> OperationResult:
    try:
        payload = operation()
    except GameError as exc:
        return OperationResult(success=False, error_message=exc.message)
    return OperationResult(success=True, payload=payload)


def register_user(
    nickname: Optional[str],
    password: Optional[str],
    identities: IdentityStore,
) -> OperationResult:
    """
    Create a new identity and issue its access token.

    The new record is flushed to storage before the result is returned.
    """

    def op() -> Dict[str, Any]:
        user = identities.register(nickname, password)
        return {"nickname": user.nickname, "token": user.token}

    return _run(op)


def login_user(
    nickname: Optional[str],
    password: Optional[str],
    identities: IdentityStore,
) -> OperationResult:
    """Recover the token of an existing identity from its credentials."""

    def op() -> Dict[str, Any]:
        user = identities.login(nickname, password)
        return {"nickname": user.nickname, "token": user.token}

    return _run(op)


def create_room(token: Optional[str], rooms: RoomRegistry) -> OperationResult:
    return _run(lambda: {"room_id": rooms.create_room(token)})


def list_rooms(token: Optional[str], rooms: RoomRegistry) -> OperationResult:
    return _run(lambda: {"games": rooms.list_rooms(token)})


def join_room(token: Optional[str], room_id: Any, rooms: RoomRegistry) -> OperationResult:
    return _run(lambda: {"room_id": rooms.join_room(token, room_id)})


def get_field(token: Optional[str], room_id: Any, rooms: RoomRegistry) -> OperationResult:
    """
    Return the visible part of a room for one of its players.

    Cards are converted to plain dicts so the payload is JSON-ready.
    """

    def op() -> Dict[str, Any]:
        state = rooms.get_field(token, room_id)
        state["cards"] = [asdict(card) for card in state["cards"]]
        return state

    return _run(op)


def debug_find_combinations(
    token: Optional[str],
    room_id: Any,
    rooms: RoomRegistry,
) -> OperationResult:
    """List every Set currently on the table, as positions in the visible slice."""

    def op() -> Dict[str, Any]:
        triples = rooms.find_visible_combinations(token, room_id)
        return {"combinations": [list(triple) for triple in triples]}

    return _run(op)
