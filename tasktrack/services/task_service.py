"""
Task business logic service (REST API store).
"""

import logging
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from tasktrack.errors import FormatError, NotFoundError, ValidationError, describe_validation_error
from tasktrack.repositories.task_file_repository import TaskFileRepository
from tasktrack.schemas.task import TaskCreate, TaskPatch, TaskRead
from tasktrack.utils.time import utc_now

logger = logging.getLogger(__name__)


def parse_task_id(raw: Any) -> int:
    """Parse an identifier that arrived as text."""
    if isinstance(raw, bool):
        raise ValidationError("id must be a number")
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError("id must be a number") from None


def next_free_id(existing: Iterable[int]) -> int:
    """Smallest positive integer not in use (first gap, or max + 1)."""
    used = set(existing)
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


class TaskService:
    """Service for task business logic."""

    def __init__(self, repository: TaskFileRepository):
        self.repository = repository

    def _load(self) -> List[TaskRead]:
        records = self.repository.read_all()
        try:
            return [TaskRead.model_validate(record) for record in records]
        except PydanticValidationError as exc:
            raise FormatError(
                f"{self.repository.path.name} holds an invalid task: {describe_validation_error(exc)}"
            ) from exc

    def _save(self, tasks: List[TaskRead]) -> None:
        self.repository.write_all([task.to_record() for task in tasks])

    @staticmethod
    def _find_index(tasks: List[TaskRead], task_id: int) -> Optional[int]:
        for index, task in enumerate(tasks):
            if task.id == task_id:
                return index
        return None

    def list_tasks(self) -> List[TaskRead]:
        """All tasks, ascending by id."""
        return sorted(self._load(), key=lambda t: t.id)

    def create_task(self, payload: Any) -> TaskRead:
        """Validate and store a new task under the first free id."""
        try:
            data = TaskCreate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_error(exc)) from None

        with self.repository.transaction():
            tasks = self._load()
            task = TaskRead(
                id=next_free_id(t.id for t in tasks),
                title=data.title,
                description=data.description,
                completed=False,
                created_at=utc_now(),
            )
            tasks.append(task)
            self._save(tasks)

        logger.info("Task created id=%s", task.id)
        return task

    def update_task(self, raw_id: Any, payload: Any) -> TaskRead:
        """Merge a partial update; id and createdAt never change."""
        task_id = parse_task_id(raw_id)

        with self.repository.transaction():
            tasks = self._load()
            index = self._find_index(tasks, task_id)
            if index is None:
                raise NotFoundError(task_id)

            try:
                patch = TaskPatch.model_validate(payload)
            except PydanticValidationError as exc:
                raise ValidationError(describe_validation_error(exc)) from None

            current = tasks[index]
            updated = current.model_copy(update={**patch.changes(), "updated_at": utc_now()})
            tasks[index] = updated
            self._save(tasks)

        logger.info("Task updated id=%s fields=%s", task_id, sorted(patch.changes()))
        return updated

    def delete_task(self, raw_id: Any) -> TaskRead:
        """Remove a task and return what it held before removal."""
        task_id = parse_task_id(raw_id)

        with self.repository.transaction():
            tasks = self._load()
            index = self._find_index(tasks, task_id)
            if index is None:
                raise NotFoundError(task_id)
            removed = tasks.pop(index)
            self._save(tasks)

        logger.info("Task deleted id=%s", task_id)
        return removed
