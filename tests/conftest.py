"""
Test configuration and fixtures
"""

import pytest
from fastapi.testclient import TestClient

from task_manager_api.app.core.config import settings
from task_manager_api.app.core.db import init_db
from task_manager_api.app.main import app
from task_manager_api.app.services.task_service import TaskService
from task_manager_api.app.services.user_service import UserService


@pytest.fixture
def database(tmp_path, monkeypatch):
    """Point the application at a fresh SQLite file for each test."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "test.db"))
    init_db()
    yield settings.database_url


@pytest.fixture
def client(database):
    """Create a test client backed by the per-test database."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_service(database):
    return UserService()


@pytest.fixture
def task_service(database):
    return TaskService()


@pytest.fixture
def create_user(client):
    """Create a user through the API and return its JSON representation."""

    def _create(name="John Doe", email="john@example.com"):
        response = client.post("/users", json={"name": name, "email": email})
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture
def create_task(client):
    """Create a task through the API and return its JSON representation."""

    def _create(user_id, title="Write report", **fields):
        payload = {"title": title, "userId": user_id, **fields}
        response = client.post("/tasks", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
