import random
import unittest
from itertools import combinations, permutations, product

from domain.cards import build_full_deck, create_shuffled_deck, shuffle
from domain.combinations import find_combinations, is_combination
from domain.models import Card


class DeckTests(unittest.TestCase):
    def test_full_deck_has_every_card_once(self):
        deck = build_full_deck()
        self.assertEqual(len(deck), 81)
        tuples = {card.attributes() for card in deck}
        self.assertEqual(len(tuples), 81)
        self.assertEqual(tuples, set(product((1, 2, 3), repeat=4)))

    def test_full_deck_order_is_fixed(self):
        deck = build_full_deck()
        self.assertEqual(deck, build_full_deck())
        self.assertEqual(deck[0], Card(1, 1, 1, 1))
        self.assertEqual(deck[1], Card(1, 1, 1, 2))
        self.assertEqual(deck[3], Card(1, 1, 2, 1))
        self.assertEqual(deck[-1], Card(3, 3, 3, 3))

    def test_shuffle_is_permutation_and_leaves_input_alone(self):
        deck = list(build_full_deck())
        before = list(deck)
        shuffled = shuffle(deck, random.Random(42))
        self.assertEqual(deck, before)
        self.assertEqual(len(shuffled), len(deck))
        self.assertCountEqual(shuffled, deck)

    def test_shuffle_is_reproducible_with_seeded_rng(self):
        self.assertEqual(
            create_shuffled_deck(random.Random(3)),
            create_shuffled_deck(random.Random(3)),
        )

    def test_shuffle_covers_all_orderings_of_small_input(self):
        rng = random.Random(0)
        seen = {shuffle((1, 2, 3), rng) for _ in range(600)}
        self.assertEqual(len(seen), 6)


class CombinationTests(unittest.TestCase):
    def test_identical_cards_form_a_set(self):
        card = Card(2, 3, 1, 2)
        self.assertTrue(is_combination(card, card, card))

    def test_all_different_attributes_form_a_set(self):
        self.assertTrue(is_combination(Card(1, 1, 1, 1), Card(2, 2, 2, 2), Card(3, 3, 3, 3)))
        self.assertTrue(is_combination(Card(1, 2, 3, 1), Card(2, 2, 1, 1), Card(3, 2, 2, 1)))

    def test_one_odd_attribute_breaks_the_set(self):
        a = Card(1, 2, 3, 1)
        self.assertFalse(is_combination(a, a, Card(1, 2, 3, 2)))
        self.assertFalse(is_combination(Card(1, 1, 1, 1), Card(2, 2, 2, 2), Card(3, 3, 3, 2)))

    def test_is_combination_is_symmetric(self):
        cards = build_full_deck()[:15]
        for triple in combinations(cards, 3):
            expected = is_combination(*triple)
            for ordering in permutations(triple):
                self.assertEqual(is_combination(*ordering), expected)

    def test_find_combinations_single_set(self):
        window = [Card(2, 2, 2, 1), Card(1, 1, 1, 1), Card(1, 1, 1, 2), Card(1, 1, 1, 3)]
        self.assertEqual(find_combinations(window), [(1, 2, 3)])

    def test_find_combinations_none(self):
        window = [Card(1, 1, 1, 1), Card(1, 1, 1, 2), Card(2, 2, 2, 1)]
        self.assertEqual(find_combinations(window), [])
        self.assertEqual(find_combinations([]), [])

    def test_find_combinations_is_canonical(self):
        triples = find_combinations(create_shuffled_deck(random.Random(11))[:12])
        self.assertEqual(len(triples), len(set(triples)))
        for i, j, k in triples:
            self.assertLess(i, j)
            self.assertLess(j, k)
        self.assertEqual(triples, sorted(triples))

    def test_full_deck_contains_1080_sets(self):
        self.assertEqual(len(find_combinations(build_full_deck())), 1080)


if __name__ == "__main__":
    unittest.main()
