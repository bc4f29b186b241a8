"""Persistence backends for board records.

- SQLAlchemy: remote relational tables (PostgreSQL, SQLite, MySQL)
- Local files: key-value namespace, one JSON file per key
- Redis: the same key-value namespace held in Redis
- In-Memory: testing and development

Example:
    ```python
    from scrum_board.storage.sql import SQLAlchemyBackend

    backend = SQLAlchemyBackend("postgresql+asyncpg://localhost/board")
    store = ScrumStore(backend)
    await store.load()
    ```
"""

from scrum_board.storage.base import BoardSnapshot, ScrumBackend
from scrum_board.storage.factory import BackendFactory
from scrum_board.storage.keyvalue import KeyValueBackend
from scrum_board.storage.local import LocalFileBackend
from scrum_board.storage.memory import InMemoryBackend
from scrum_board.storage.redis import RedisBackend
from scrum_board.storage.sql import SQLAlchemyBackend

__all__ = [
    "BackendFactory",
    "BoardSnapshot",
    "InMemoryBackend",
    "KeyValueBackend",
    "LocalFileBackend",
    "RedisBackend",
    "SQLAlchemyBackend",
    "ScrumBackend",
]
