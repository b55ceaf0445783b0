from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Dict, Optional

from domain.errors import PersistenceError
from domain.models import User
from domain.repositories import UserStorage

logger = logging.getLogger(__name__)


class FileUserStorage(UserStorage):
    """
    Directory-backed implementation of `UserStorage`.

    Each user lives in its own JSON file named after the token. Writes go to
    a temporary file in the same directory which is then renamed over the
    final path, so readers never observe a half-written record.
    """

    def __init__(self, data_dir: str) -> None:
        self._data_dir = Path(data_dir)

    def _ensure_dir(self) -> bool:
        if self._data_dir.is_dir():
            return True
        self._data_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Created user store directory %s", self._data_dir)
        return False

    @staticmethod
    def _to_record(user: User) -> Dict[str, Any]:
        return {
            "token": user.token,
            "nickname": user.nickname,
            "password_hash": user.password_hash,
            "modified": user.modified_at,
            "saved": user.saved_at,
        }

    @staticmethod
    def _to_domain(token: str, record: Dict[str, Any]) -> User:
        return User(
            token=str(record.get("token", token)),
            nickname=record["nickname"],
            password_hash=record["password_hash"],
            modified_at=int(record["modified"]),
            saved_at=int(record.get("saved", 0)),
        )

    def load_all(self) -> Dict[str, User]:
        try:
            existed = self._ensure_dir()
        except OSError as exc:
            raise PersistenceError(f"Cannot create user store {self._data_dir}: {exc}") from exc
        if not existed:
            return {}

        logger.info("Loading saved state from %s", self._data_dir)
        users: Dict[str, User] = {}
        for path in sorted(self._data_dir.iterdir()):
            if not path.is_file() or path.name.startswith("."):
                continue
            try:
                with path.open("r", encoding="utf-8") as f:
                    record = json.load(f)
                user = self._to_domain(path.name, record)
            except (OSError, ValueError, KeyError) as exc:
                raise PersistenceError(f"Cannot read user record {path}: {exc}") from exc
            users[user.token] = user
        return users

    def write(self, user: User) -> None:
        # The record on disk already carries the save time it is written for.
        payload = self._to_record(user)
        tmp_path: Optional[Path] = None
        try:
            self._ensure_dir()
            with NamedTemporaryFile(
                "w",
                delete=False,
                dir=self._data_dir,
                prefix=".tmp-",
                encoding="utf-8",
            ) as tmp:
                tmp_path = Path(tmp.name)
                json.dump(payload, tmp)
                tmp.flush()
                os.fsync(tmp.fileno())
            tmp_path.replace(self._data_dir / user.token)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write user record {user.token}: {exc}") from exc
