from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Mapping

from application.identity import IdentityStore
from application.rooms import RoomRegistry
from application.services import (
    OperationResult,
    create_room,
    debug_find_combinations,
    get_field,
    join_room,
    list_rooms,
    login_user,
    register_user,
)
from domain.errors import GameError, MalformedRequest

logger = logging.getLogger(__name__)

Body = Mapping[str, Any]


class RequestHandler:
    """
    Transport-neutral entry point into the game engine.

    A request is an operation name plus a JSON object body; the answer is a
    plain dict ready to be serialised back to the client. Whatever carries
    the bytes (HTTP, a socket, stdin) only has to call `handle_raw`.
    """

    def __init__(self, identities: IdentityStore, rooms: RoomRegistry) -> None:
        self._routes: Dict[str, Callable[[Body], OperationResult]] = {
            "register": lambda b: register_user(b.get("nickname"), b.get("password"), identities),
            "login": lambda b: login_user(b.get("nickname"), b.get("password"), identities),
            "create_room": lambda b: create_room(b.get("token"), rooms),
            "list_rooms": lambda b: list_rooms(b.get("token"), rooms),
            "join_room": lambda b: join_room(b.get("token"), b.get("room_id"), rooms),
            "get_field": lambda b: get_field(b.get("token"), b.get("room_id"), rooms),
            "debug_find_combinations": lambda b: debug_find_combinations(
                b.get("token"), b.get("room_id"), rooms
            ),
        }

    @property
    def operations(self) -> List[str]:
        return sorted(self._routes)

    def handle_request(self, operation: str, body: Any) -> Dict[str, Any]:
        route = self._routes.get(operation)
        if route is None:
            return _error("Unknown operation")

        try:
            if not isinstance(body, Mapping):
                raise MalformedRequest()
            result = route(body)
        except GameError as exc:
            return _error(exc.message)
        except Exception:  # Never let one request take the process down.
            logger.exception("Operation %s failed", operation)
            return _error("Internal server error")
        return result.to_envelope()

    def handle_raw(self, raw: str) -> Dict[str, Any]:
        """
        Handle one serialised request.

        Format: {"operation": "<name>", "body": {...}}
        """

        try:
            request = _parse_request(raw)
        except MalformedRequest as exc:
            return _error(exc.message)

        return self.handle_request(str(request.get("operation", "")), request.get("body", {}))


def _parse_request(raw: str) -> Dict[str, Any]:
    try:
        request = json.loads(raw)
    except ValueError:
        raise MalformedRequest() from None
    if not isinstance(request, dict):
        raise MalformedRequest()
    return request


def _error(message: str) -> Dict[str, Any]:
    return OperationResult(success=False, error_message=message).to_envelope()
