from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional

from domain.cards import DECK_SIZE, create_shuffled_deck
from domain.combinations import IndexTriple, find_combinations
from domain.errors import AlreadyJoined, InvalidRoomId, MissingRoomId, NotAPlayer
from domain.models import Player, Room

from .identity import IdentityStore
from .persistence import now_ms

logger = logging.getLogger(__name__)

DEFAULT_CARDS_VISIBLE = 12


class RoomRegistry:
    """
    Owns every game room and the players seated in them.

    Room ids are positions in an append-only list, so an id never changes
    meaning once issued. Every operation first resolves the caller's token
    through the identity store.
    """

    def __init__(
        self,
        identities: IdentityStore,
        cards_visible: int = DEFAULT_CARDS_VISIBLE,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if not 0 <= cards_visible <= DECK_SIZE:
            raise ValueError(f"cards_visible must be between 0 and {DECK_SIZE}")
        self._identities = identities
        self._cards_visible = cards_visible
        self._rng = rng
        self._clock = clock
        self._lock = threading.Lock()
        self._rooms: List[Room] = []

    def create_room(self, token: Optional[str]) -> int:
        self._identities.validate(token)
        deck = create_shuffled_deck(self._rng)

        with self._lock:
            room = Room(
                id=len(self._rooms),
                created_at=self._clock(),
                deck=deck,
                cards_visible=self._cards_visible,
            )
            self._rooms.append(room)

        logger.info("Created room %d", room.id)
        return room.id

    def list_rooms(self, token: Optional[str]) -> List[Dict[str, Any]]:
        self._identities.validate(token)
        with self._lock:
            return [{"id": room.id, "users": list(room.players)} for room in self._rooms]

    def join_room(self, token: Optional[str], room_id: Any) -> int:
        user = self._identities.validate(token)
        with self._lock:
            room = self._get_room_locked(room_id)
            if user.nickname in room.players:
                raise AlreadyJoined()
            room.players[user.nickname] = Player(nickname=user.nickname)

        logger.info("User %s joined room %d", user.nickname, room.id)
        return room.id

    def get_field(self, token: Optional[str], room_id: Any) -> Dict[str, Any]:
        """
        Return what a seated player sees of the room.

        `cards_remaining` is the full deck length, not the part past the
        reveal window.
        """

        with self._lock:
            room = self._get_member_room_locked(token, room_id)
            return {
                "players": {p.nickname: {"score": p.score} for p in room.players.values()},
                "cards": list(room.visible_cards()),
                "cards_visible": room.cards_visible,
                "cards_remaining": len(room.deck),
            }

    def find_visible_combinations(self, token: Optional[str], room_id: Any) -> List[IndexTriple]:
        with self._lock:
            visible = self._get_member_room_locked(token, room_id).visible_cards()
        return find_combinations(visible)

    def _get_member_room_locked(self, token: Optional[str], room_id: Any) -> Room:
        user = self._identities.validate(token)
        room = self._get_room_locked(room_id)
        if user.nickname not in room.players:
            raise NotAPlayer()
        return room

    def _get_room_locked(self, room_id: Any) -> Room:
        if room_id is None or room_id == "":
            raise MissingRoomId()
        # Booleans are ints in Python but never valid ids.
        if isinstance(room_id, int) and not isinstance(room_id, bool):
            index = room_id
        elif isinstance(room_id, str) and room_id.strip().isdecimal():
            index = int(room_id)
        else:
            raise InvalidRoomId()
        if not 0 <= index < len(self._rooms):
            raise InvalidRoomId()
        return self._rooms[index]
