from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Dict, Iterable

from domain.models import User
from domain.repositories import UserStorage

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class PersistenceEngine:
    """
    Write-back persistence for user records.

    Only records whose modification time is newer than their last save are
    written, one storage unit per record. A failure stops the batch: records
    written before it stay flushed, the rest stay dirty for the next flush.
    """

    def __init__(self, storage: UserStorage, clock: Callable[[], int] = now_ms) -> None:
        self._storage = storage
        self._clock = clock

    def load(self) -> Dict[str, User]:
        users = self._storage.load_all()
        logger.info("Loaded %d user record(s)", len(users))
        return users

    def flush(self, users: Iterable[User]) -> int:
        """
        Write every dirty record and mark it clean.

        Returns the number of records written. Storage errors propagate as
        `PersistenceError`.
        """

        written = 0
        for user in users:
            if not user.is_dirty:
                continue

            saved_at = max(self._clock(), user.modified_at)
            self._storage.write(replace(user, saved_at=saved_at))
            user.saved_at = saved_at
            written += 1

        if written:
            logger.debug("Flushed %d user record(s)", written)
        return written
