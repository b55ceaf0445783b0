from __future__ import annotations

import random
from itertools import product
from typing import Optional, Sequence

from .models import Card, Deck

ATTRIBUTE_VALUES = (1, 2, 3)
DECK_SIZE = len(ATTRIBUTE_VALUES) ** 4


def build_full_deck() -> Deck:
    """
    Return all 81 distinct cards.

    Order is fixed: count varies slowest, then color, then shape, then fill.
    """

    return tuple(
        Card(count=count, color=color, shape=shape, fill=fill)
        for count, color, shape, fill in product(ATTRIBUTE_VALUES, repeat=4)
    )


def shuffle(deck: Sequence[Card], rng: Optional[random.Random] = None) -> Deck:
    """Return a uniformly shuffled copy of `deck`; the input is left untouched."""

    cards = list(deck)
    # Fisher-Yates on the copy.
    (rng or random).shuffle(cards)
    return tuple(cards)


def create_shuffled_deck(rng: Optional[random.Random] = None) -> Deck:
    return shuffle(build_full_deck(), rng)
