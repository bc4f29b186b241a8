"""Factory for creating persistence backends from configuration."""

from __future__ import annotations

from scrum_board.core.config import ScrumConfig, StorageBackend
from scrum_board.core.exceptions import ConfigurationError
from scrum_board.storage.base import ScrumBackend


class BackendFactory:
    """Factory for creating :class:`ScrumBackend` instances."""

    @staticmethod
    def create(config: ScrumConfig) -> ScrumBackend:
        """Create the backend selected by ``config.backend``."""
        if config.backend == StorageBackend.MEMORY:
            from scrum_board.storage.memory import InMemoryBackend
            return InMemoryBackend()

        if config.backend == StorageBackend.LOCAL:
            from scrum_board.storage.local import LocalFileBackend
            return LocalFileBackend(config.storage_path)

        if config.backend == StorageBackend.SQL:
            if not config.database_url:
                raise ConfigurationError("database_url", "required by the sql backend")
            from scrum_board.storage.sql import SQLAlchemyBackend
            return SQLAlchemyBackend(config.database_url, echo=config.database_echo)

        if config.backend == StorageBackend.REDIS:
            if not config.redis_url:
                raise ConfigurationError("redis_url", "required by the redis backend")
            from scrum_board.storage.redis import RedisBackend
            return RedisBackend(config.redis_url, key_prefix=config.redis_key_prefix)

        raise ConfigurationError("backend", f"unsupported backend {config.backend!r}")


__all__ = ["BackendFactory"]
