"""
FastAPI dependency providers.

Tests swap the repository with ``app.dependency_overrides[get_task_repository]``.
"""

from typing import Optional

from fastapi import Depends

from tasktrack.core.config import settings
from tasktrack.repositories.task_file_repository import TaskFileRepository
from tasktrack.services.task_service import TaskService
from tasktrack.ui.local_storage import SqlLocalStorage
from tasktrack.ui.task_store import ClientTaskStore, Notifier


def get_task_repository() -> TaskFileRepository:
    """Repository bound to the configured tasks file."""
    return TaskFileRepository(settings.TASKS_FILE)


def get_task_service(
    repository: TaskFileRepository = Depends(get_task_repository),
) -> TaskService:
    return TaskService(repository)


def get_client_task_store(notifier: Optional[Notifier] = None) -> ClientTaskStore:
    """Browser task store on the configured local storage, with the saved list loaded."""
    storage = SqlLocalStorage(settings.CLIENT_STORAGE_URL)
    store = ClientTaskStore(storage, settings.CLIENT_STORAGE_KEY, notifier)
    store.load()
    return store
