"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from tasktrack.core.dependencies import get_task_repository
from tasktrack.main import app
from tasktrack.repositories.task_file_repository import TaskFileRepository
from tasktrack.services.task_service import TaskService
from tasktrack.ui.local_storage import MemoryLocalStorage
from tasktrack.ui.task_store import ClientTaskStore


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "api: exercises the HTTP layer through TestClient")


@pytest.fixture
def tasks_file(tmp_path):
    return tmp_path / "tasks.json"


@pytest.fixture
def repository(tasks_file):
    return TaskFileRepository(tasks_file)


@pytest.fixture
def service(repository):
    return TaskService(repository)


@pytest.fixture
def client(repository):
    """TestClient whose task endpoints read and write a temp file."""
    app.dependency_overrides[get_task_repository] = lambda: repository
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_task_repository, None)


class RecordingNotifier:
    """Collects (level, message) pairs the store would show as toasts."""

    def __init__(self):
        self.messages = []

    def __call__(self, level, message):
        self.messages.append((level, message))

    def levels(self):
        return [level for level, _ in self.messages]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def local_storage():
    return MemoryLocalStorage()


@pytest.fixture
def store(local_storage, notifier):
    return ClientTaskStore(local_storage, notifier=notifier)
