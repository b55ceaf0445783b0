from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import threading
from typing import Callable, Dict, List, Optional

from domain.errors import (
    InternalCollision,
    InvalidCredentials,
    InvalidToken,
    MissingField,
    NicknameTaken,
    PersistenceError,
)
from domain.models import User

from .persistence import PersistenceEngine, now_ms

logger = logging.getLogger(__name__)


def salted_hash(salt: str, value: str) -> str:
    return hashlib.sha256((salt + value).encode("utf-8")).hexdigest()


def _require_credentials(nickname: object, password: object) -> None:
    # Non-string values count as absent.
    if not nickname or not isinstance(nickname, str):
        raise MissingField("Nickname missing")
    if not password or not isinstance(password, str):
        raise MissingField("Password missing")


class IdentityStore:
    """
    Registry of user identities, keyed by access token.

    Keeps a nickname -> token index next to the token -> user map and is the
    only component that hands records to the persistence engine. All reads
    and writes of the two maps happen under one lock.
    """

    def __init__(
        self,
        persistence: PersistenceEngine,
        token_salt: str = "",
        password_salt: str = "",
        clock: Callable[[], int] = now_ms,
        token_source: Callable[[], str] = lambda: secrets.token_hex(16),
    ) -> None:
        self._persistence = persistence
        self._token_salt = token_salt
        self._password_salt = password_salt
        self._clock = clock
        self._token_source = token_source
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self._nicknames: Dict[str, str] = {}

    def load(self) -> int:
        """Replace in-memory state with what the persistence engine holds."""

        users = self._persistence.load()
        with self._lock:
            self._users = dict(users)
            self._nicknames = {user.nickname: token for token, user in users.items()}
        return len(users)

    def _hash_password(self, password: str) -> str:
        return salted_hash(self._password_salt, password)

    def register(self, nickname: Optional[str], password: Optional[str]) -> User:
        _require_credentials(nickname, password)

        with self._lock:
            if nickname in self._nicknames:
                raise NicknameTaken()

            token = salted_hash(self._token_salt, self._token_source())
            if token in self._users:
                raise InternalCollision()

            user = User(
                token=token,
                nickname=nickname,
                password_hash=self._hash_password(password),
                modified_at=self._clock(),
                saved_at=0,
            )
            self._nicknames[nickname] = token
            self._users[token] = user
            self._flush_locked()

        logger.info("Registered user %s", nickname)
        return user

    def login(self, nickname: Optional[str], password: Optional[str]) -> User:
        _require_credentials(nickname, password)

        with self._lock:
            token = self._nicknames.get(nickname)
            user = self._users.get(token) if token is not None else None

        if user is None or not hmac.compare_digest(
            user.password_hash, self._hash_password(password)
        ):
            raise InvalidCredentials()
        return user

    def validate(self, token: Optional[str]) -> User:
        with self._lock:
            user = self._users.get(token) if isinstance(token, str) else None
        if user is None:
            raise InvalidToken()
        return user

    def users(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def flush(self) -> int:
        with self._lock:
            return self._flush_locked()

    def _flush_locked(self) -> int:
        # A failed write must not undo the registration; the record stays
        # dirty and is picked up by the next flush.
        try:
            return self._persistence.flush(self._users.values())
        except PersistenceError:
            logger.exception("Failed to flush user records")
            return 0
