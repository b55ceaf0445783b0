import random
import unittest

from application.identity import IdentityStore
from application.persistence import PersistenceEngine
from application.rooms import RoomRegistry
from application.services import (
    create_room,
    debug_find_combinations,
    get_field,
    join_room,
    list_rooms,
    login_user,
    register_user,
)
from domain.cards import create_shuffled_deck
from domain.combinations import find_combinations
from domain.errors import AlreadyJoined, InvalidRoomId, InvalidToken, MissingRoomId, NotAPlayer
from fakes import Clock, InMemoryUserStorage, counting_tokens


class RoomRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        clock = Clock()
        self.identities = IdentityStore(
            PersistenceEngine(InMemoryUserStorage(), clock=clock),
            clock=clock,
            token_source=counting_tokens(),
        )
        self.rooms = RoomRegistry(self.identities, rng=random.Random(7), clock=clock)
        self.alice = self.identities.register("alice", "pw").token
        self.bob = self.identities.register("bob", "pw").token

    def test_create_room_requires_valid_token(self):
        with self.assertRaises(InvalidToken):
            self.rooms.create_room("bogus")
        self.assertEqual(self.rooms.list_rooms(self.alice), [])

    def test_room_ids_are_sequential(self):
        self.assertEqual(self.rooms.create_room(self.alice), 0)
        self.assertEqual(self.rooms.create_room(self.bob), 1)
        self.assertEqual(
            self.rooms.list_rooms(self.alice),
            [{"id": 0, "users": []}, {"id": 1, "users": []}],
        )

    def test_join_twice_fails(self):
        room_id = self.rooms.create_room(self.alice)
        self.assertEqual(self.rooms.join_room(self.alice, room_id), room_id)
        with self.assertRaises(AlreadyJoined):
            self.rooms.join_room(self.alice, room_id)
        self.assertEqual(self.rooms.list_rooms(self.alice), [{"id": 0, "users": ["alice"]}])

    def test_join_room_id_validation(self):
        self.rooms.create_room(self.alice)
        with self.assertRaises(MissingRoomId):
            self.rooms.join_room(self.alice, None)
        for bad in (-1, 1, "abc", 0.5, True):
            with self.assertRaises(InvalidRoomId):
                self.rooms.join_room(self.alice, bad)
        with self.assertRaises(InvalidToken):
            self.rooms.join_room("bogus", 0)
        self.assertEqual(self.rooms.join_room(self.alice, "0"), 0)

    def test_get_field_requires_membership(self):
        room_id = self.rooms.create_room(self.alice)
        with self.assertRaises(NotAPlayer):
            self.rooms.get_field(self.alice, room_id)

        self.rooms.join_room(self.alice, room_id)
        field = self.rooms.get_field(self.alice, room_id)
        expected_deck = create_shuffled_deck(random.Random(7))
        self.assertEqual(field["cards_visible"], 12)
        self.assertEqual(field["cards"], list(expected_deck[:12]))
        self.assertEqual(field["cards_remaining"], 81)
        self.assertEqual(field["players"], {"alice": {"score": 0}})

        with self.assertRaises(NotAPlayer):
            self.rooms.get_field(self.bob, room_id)

    def test_find_visible_combinations_uses_visible_slice(self):
        room_id = self.rooms.create_room(self.alice)
        self.rooms.join_room(self.alice, room_id)
        expected = find_combinations(create_shuffled_deck(random.Random(7))[:12])
        self.assertEqual(self.rooms.find_visible_combinations(self.alice, room_id), expected)

    def test_cards_visible_bounds(self):
        with self.assertRaises(ValueError):
            RoomRegistry(self.identities, cards_visible=82)


class ApplicationServicesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.identities = IdentityStore(
            PersistenceEngine(InMemoryUserStorage()),
            token_source=counting_tokens(),
        )
        self.rooms = RoomRegistry(self.identities)

    def test_register_and_login(self):
        result = register_user("alice", "pw1", self.identities)
        self.assertTrue(result.success)
        token = result.payload["token"]
        self.assertEqual(result.to_envelope(), {"nickname": "alice", "token": token})

        again = register_user("alice", "pw2", self.identities)
        self.assertFalse(again.success)
        self.assertEqual(
            again.to_envelope(),
            {"success": False, "exception": {"message": "Nickname taken"}},
        )

        login = login_user("alice", "pw1", self.identities)
        self.assertEqual(login.payload["token"], token)
        self.assertEqual(login_user("alice", "pw2", self.identities).error_message,
                         "Invalid nickname or password")

    def test_room_flow(self):
        token = register_user("alice", "pw", self.identities).payload["token"]

        room_id = create_room(token, self.rooms).payload["room_id"]
        self.assertEqual(room_id, 0)

        not_joined = get_field(token, room_id, self.rooms)
        self.assertFalse(not_joined.success)
        self.assertEqual(not_joined.error_message, "Not a player in this room")

        self.assertEqual(join_room(token, room_id, self.rooms).payload, {"room_id": 0})
        self.assertEqual(
            join_room(token, room_id, self.rooms).error_message, "Already joined"
        )
        self.assertEqual(
            list_rooms(token, self.rooms).payload, {"games": [{"id": 0, "users": ["alice"]}]}
        )

        field = get_field(token, room_id, self.rooms).payload
        self.assertEqual(len(field["cards"]), 12)
        self.assertEqual(set(field["cards"][0]), {"count", "color", "shape", "fill"})

        combos = debug_find_combinations(token, room_id, self.rooms).payload["combinations"]
        for triple in combos:
            self.assertEqual(len(triple), 3)
            self.assertEqual(triple, sorted(triple))

    def test_invalid_token_envelope(self):
        result = create_room("bogus", self.rooms)
        self.assertEqual(
            result.to_envelope(),
            {"success": False, "exception": {"message": "Invalid token"}},
        )


if __name__ == "__main__":
    unittest.main()
