"""FastAPI integration: lifespan-owned store and the request dependency."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from scrum_board.core.config import ScrumConfig
from scrum_board.core.types import ProjectDraft, TaskDraft
from scrum_board.dependencies import create_lifespan, get_scrum_store
from scrum_board.storage.memory import InMemoryBackend
from scrum_board.store import ScrumStore


class TestGetScrumStore:

    @pytest.mark.asyncio
    async def test_returns_store_from_app_state(self) -> None:
        store = ScrumStore(InMemoryBackend())
        request = MagicMock()
        request.app.state.scrum_store = store
        assert await get_scrum_store(request) is store

    @pytest.mark.asyncio
    async def test_missing_store_raises(self) -> None:
        request = MagicMock()
        request.app.state = MagicMock(spec=[])
        with pytest.raises(RuntimeError, match="create_lifespan"):
            await get_scrum_store(request)


class TestCreateLifespan:

    def test_store_loaded_and_served(self) -> None:
        backend = InMemoryBackend()
        app = FastAPI(lifespan=create_lifespan(ScrumConfig(), backend=backend))

        @app.post("/tasks")
        async def add(title: str, store: ScrumStore = Depends(get_scrum_store)):
            if store.current_project is None:
                await store.add_project(ProjectDraft(title="Webshop"))
            task = await store.add_task(TaskDraft(title=title))
            return {"id": task.id}

        @app.get("/backlog")
        async def backlog(store: ScrumStore = Depends(get_scrum_store)):
            return [t.title for t in store.get_backlog_tasks()]

        with TestClient(app) as client:
            assert client.post("/tasks", params={"title": "Login"}).status_code == 200
            assert client.get("/backlog").json() == ["Login"]
            assert isinstance(app.state.scrum_store, ScrumStore)
            assert app.state.scrum_store.backend is backend
