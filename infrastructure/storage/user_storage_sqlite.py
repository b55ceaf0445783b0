from __future__ import annotations

import sqlite3
from typing import Dict

from domain.errors import PersistenceError
from domain.models import User
from domain.repositories import UserStorage


class SqliteUserStorage(UserStorage):
    """
    SQLite-backed implementation of `UserStorage`.

    Owns the `users` table, one row per token. Each write is a single-row
    upsert committed on its own, so records are flushed independently.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    token TEXT PRIMARY KEY,
                    nickname TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    modified INTEGER NOT NULL,
                    saved INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> User:
        return User(
            token=str(row[0]),
            nickname=row[1],
            password_hash=row[2],
            modified_at=int(row[3]),
            saved_at=int(row[4]),
        )

    def load_all(self) -> Dict[str, User]:
        try:
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute("SELECT token, nickname, password_hash, modified, saved FROM users")
                rows = cur.fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read user records from {self._db_path}: {exc}") from exc
        return {str(row[0]): self._to_domain(row) for row in rows}

    def write(self, user: User) -> None:
        try:
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    INSERT INTO users (token, nickname, password_hash, modified, saved)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT (token)
                    DO UPDATE SET
                        nickname = excluded.nickname,
                        password_hash = excluded.password_hash,
                        modified = excluded.modified,
                        saved = excluded.saved
                    """,
                    (
                        user.token,
                        user.nickname,
                        user.password_hash,
                        user.modified_at,
                        user.saved_at,
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot write user record {user.token}: {exc}") from exc
