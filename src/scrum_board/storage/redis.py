"""Redis-held key-value namespace.

Same layout as the local backend, with every key prefixed::

    scrum:scrumTasks  -> JSON array of tasks
    scrum:currentProjectId
"""
from __future__ import annotations

import logging
from typing import Any

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from scrum_board.core.exceptions import PersistenceError
from scrum_board.storage.keyvalue import COLLECTION_KEYS, CURRENT_PROJECT_KEY, KeyValueBackend
from scrum_board.utils.db_compat import mask_url_password

logger = logging.getLogger(__name__)


class RedisBackend(KeyValueBackend):
    """Key-value backend over a Redis database.

    Example
    -------
    .. code-block:: python

        backend = RedisBackend(redis_url="redis://localhost:6379/0", key_prefix="team-a")
        store = ScrumStore(backend)
        await store.load()
    """

    def __init__(self, redis_url: str, key_prefix: str = "scrum") -> None:
        super().__init__()
        self.key_prefix = key_prefix
        self.redis: aioredis.Redis = aioredis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=False,
        )
        logger.info("RedisBackend url=%s prefix=%s", mask_url_password(redis_url), key_prefix)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def _read(self, key: str) -> str | None:
        try:
            raw = await self.redis.get(self._key(key))
        except RedisError as exc:
            raise PersistenceError("read", str(exc), {"key": key}) from exc
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    async def _write(self, key: str, value: str) -> None:
        try:
            await self.redis.set(self._key(key), value.encode("utf-8"))
        except RedisError as exc:
            raise PersistenceError("write", str(exc), {"key": key}) from exc

    async def clear(self) -> int:
        """Delete every key of this board's namespace.  Returns keys deleted."""
        keys = [self._key(k) for k in (*COLLECTION_KEYS.values(), CURRENT_PROJECT_KEY)]
        deleted: int = await self.redis.delete(*keys)
        self._collections = None
        logger.info("Cleared %d Redis keys under prefix %s", deleted, self.key_prefix)
        return deleted

    async def get_stats(self) -> dict[str, Any]:
        """Return which namespace keys currently exist."""
        present = {}
        for key in (*COLLECTION_KEYS.values(), CURRENT_PROJECT_KEY):
            present[key] = bool(await self.redis.exists(self._key(key)))
        return {"key_prefix": self.key_prefix, "keys": present}

    async def close(self) -> None:
        """Close the Redis connection pool."""
        logger.info("Closing RedisBackend")
        await self.redis.aclose()


__all__ = ["RedisBackend"]
