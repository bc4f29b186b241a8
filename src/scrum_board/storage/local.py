"""Local persisted storage: one JSON file per key in a directory.

Writes are synchronous and atomic (temp file + rename); the async methods
exist only to honour the :class:`~scrum_board.storage.base.ScrumBackend`
contract.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from scrum_board.core.exceptions import PersistenceError
from scrum_board.storage.keyvalue import KeyValueBackend

logger = logging.getLogger(__name__)


class LocalFileBackend(KeyValueBackend):
    """Key-value backend storing ``<key>.json`` files under *directory*.

    Example
    -------
    .. code-block:: python

        backend = LocalFileBackend("~/.scrum-board")
        await backend.initialize()      # creates the directory
        store = ScrumStore(backend)
        await store.load()
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        super().__init__()
        self.directory = Path(directory).expanduser()
        logger.info("LocalFileBackend directory=%s", self.directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    async def initialize(self) -> None:
        """Create the storage directory if missing (idempotent)."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError("initialize", str(exc)) from exc

    async def _read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError("read", str(exc), {"key": key}) from exc

    async def _write(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            raise PersistenceError("write", str(exc), {"key": key}) from exc


__all__ = ["LocalFileBackend"]
