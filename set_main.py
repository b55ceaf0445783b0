import json
import logging
import sys

from dotenv import load_dotenv

from application.identity import IdentityStore
from application.persistence import PersistenceEngine
from application.rooms import RoomRegistry
from config import Settings
from domain.repositories import UserStorage
from infrastructure.storage.user_storage_files import FileUserStorage
from infrastructure.storage.user_storage_sqlite import SqliteUserStorage
from interfaces.jsonlines.handlers import RequestHandler


load_dotenv()

logger = logging.getLogger("setserver")


def build_storage(settings: Settings) -> UserStorage:
    if settings.storage_backend == "files":
        return FileUserStorage(settings.data_dir)
    if settings.storage_backend == "sqlite":
        return SqliteUserStorage(settings.db_path)
    raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")


def build_handler(settings: Settings) -> RequestHandler:
    persistence = PersistenceEngine(build_storage(settings))
    identities = IdentityStore(
        persistence,
        token_salt=settings.token_salt,
        password_salt=settings.password_salt,
    )
    identities.load()
    rooms = RoomRegistry(identities, cards_visible=settings.cards_visible)
    return RequestHandler(identities, rooms)


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    handler = build_handler(settings)
    logger.info("Ready; reading JSON requests from stdin")

    # One request per line, one response per line.
    for line in sys.stdin:
        if not line.strip():
            continue
        response = handler.handle_raw(line)
        sys.stdout.write(json.dumps(response) + "\n")
        sys.stdout.flush()


if __name__ == "__main__":
    main()
