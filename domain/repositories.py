from __future__ import annotations

from typing import Dict, Protocol

from .models import User


class UserStorage(Protocol):
    """
    Abstraction over durable storage of user records.

    Implementations are responsible for:
    - Keeping exactly one storage unit (file, row) per user, keyed by token.
    - Making each single-record write atomic, so a crash leaves either the
      previous or the new version of that record.
    - Creating their storage location on first use.
    """

    def load_all(self) -> Dict[str, User]:
        """Return every stored user keyed by token (empty on first run)."""

        ...

    def write(self, user: User) -> None:
        """Persist the full record of `user`, replacing any previous version."""

        ...
