# tests/conftest.py

from __future__ import annotations

import pytest

from backend.app import create_app
from backend.services.task_service import TaskService

from .fakes import FakeTaskStore


@pytest.fixture()
def store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture()
def service(store: FakeTaskStore) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def app(store: FakeTaskStore):
    """
    Flask app wired to the in-memory store.

    No Mongo client is created because a store is injected.
    """
    app = create_app(config={"TESTING": True, "ENV": "testing"}, store=store)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()
