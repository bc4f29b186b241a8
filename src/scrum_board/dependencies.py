"""FastAPI integration: one store per application session.

The store is created and loaded in the application's lifespan and kept on
``app.state.scrum_store``; handlers receive it through :func:`get_scrum_store`.

.. code-block:: python

    from fastapi import Depends, FastAPI
    from scrum_board import ScrumConfig, ScrumStore
    from scrum_board.dependencies import create_lifespan, get_scrum_store

    app = FastAPI(lifespan=create_lifespan(ScrumConfig(backend="local")))

    @app.get("/backlog")
    async def backlog(store: ScrumStore = Depends(get_scrum_store)):
        return store.get_backlog_tasks()
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import Request

from scrum_board.store import ScrumStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI
    from starlette.types import Lifespan

    from scrum_board.core.config import ScrumConfig
    from scrum_board.storage.base import ScrumBackend

logger = logging.getLogger(__name__)


def create_lifespan(
    config: ScrumConfig,
    *,
    backend: ScrumBackend | None = None,
) -> Lifespan[FastAPI]:
    """Build a FastAPI ``lifespan`` that owns a :class:`ScrumStore`.

    Parameters
    ----------
    config:
        Store configuration; selects the backend unless *backend* is given.
    backend:
        Optional pre-built persistence adapter (useful in tests).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = ScrumStore(backend, config)
        await store.load()
        app.state.scrum_store = store
        logger.info("Scrum store ready")
        try:
            yield
        finally:
            await store.close()

    return lifespan


async def get_scrum_store(request: Request) -> ScrumStore:
    """Return the application's store (FastAPI dependency)."""
    store = getattr(request.app.state, "scrum_store", None)
    if store is None:
        raise RuntimeError(
            "scrum_store not found on app.state. "
            "Did you forget to pass create_lifespan() to FastAPI?"
        )
    return store


__all__ = ["create_lifespan", "get_scrum_store"]
