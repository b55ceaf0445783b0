from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import Card

IndexTriple = Tuple[int, int, int]


def is_combination(a: Card, b: Card, c: Card) -> bool:
    """
    Return True if the three cards form a Set.

    For every attribute the three values must be all equal or all different,
    i.e. the number of differing pairs is 0 or 3.
    """

    for x, y, z in zip(a.attributes(), b.attributes(), c.attributes()):
        differing = (x != y) + (x != z) + (y != z)
        if differing not in (0, 3):
            return False
    return True


def find_combinations(visible_cards: Sequence[Card]) -> List[IndexTriple]:
    """
    Enumerate every Set among `visible_cards`.

    Each triple is reported once as ascending positions `(i, j, k)` with
    `i < j < k`, in lexicographic order.
    """

    n = len(visible_cards)
    found: List[IndexTriple] = []
    for i in range(n):
        for j in range(i + 1, n):
            for k in range(j + 1, n):
                if is_combination(visible_cards[i], visible_cards[j], visible_cards[k]):
                    found.append((i, j, k))
    return found
