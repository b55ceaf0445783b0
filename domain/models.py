from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class Card:
    """
    A single Set card.

    Every attribute takes a value from {1, 2, 3}. Cards carry no identity
    beyond their attribute tuple, so two equal cards are interchangeable.
    """

    count: int
    color: int
    shape: int
    fill: int

    def attributes(self) -> Tuple[int, int, int, int]:
        return (self.count, self.color, self.shape, self.fill)


Deck = Tuple[Card, ...]


@dataclass
class User:
    """
    A registered player identity.

    `modified_at` and `saved_at` are epoch milliseconds. A record whose
    modification time is newer than its save time still has to be flushed.
    """

    token: str
    nickname: str
    password_hash: str
    modified_at: int
    saved_at: int = 0

    @property
    def is_dirty(self) -> bool:
        return self.modified_at > self.saved_at


@dataclass
class Player:
    """Membership of a user in one room."""

    nickname: str
    score: int = 0


@dataclass
class Room:
    """
    A game room: a shuffled deck, how much of it is revealed, and who plays.

    The deck never changes after creation; the cards still in play are the
    ones at or beyond the `cards_visible` boundary.
    """

    id: int
    created_at: int
    deck: Deck
    cards_visible: int
    players: Dict[str, Player] = field(default_factory=dict)

    def visible_cards(self) -> Deck:
        return self.deck[: self.cards_visible]
