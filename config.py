from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Runtime configuration, read from the environment (and `.env`)."""

    data_dir: str = "/tmp/setserver/"
    storage_backend: str = "files"
    db_path: str = "setserver.db"
    token_salt: str = ""
    password_salt: str = ""
    cards_visible: int = 12
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=os.environ.get("DATA_DIR", cls.data_dir),
            storage_backend=os.environ.get("STORAGE_BACKEND", cls.storage_backend).lower(),
            db_path=os.environ.get("DB_PATH", cls.db_path),
            token_salt=os.environ.get("TOKEN_SALT", cls.token_salt),
            password_salt=os.environ.get("PASSWORD_SALT", cls.password_salt),
            cards_visible=int(os.environ.get("CARDS_VISIBLE", str(cls.cards_visible))),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level).upper(),
        )
