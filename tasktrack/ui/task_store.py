"""
Browser task store.

Holds the task list and the list-view state (filter, sort, search, the task
being edited, the task awaiting delete confirmation). One instance per
session; the rendering layer gets it passed in and calls these methods from
its event handlers.

Every mutation writes the whole list back to local storage straight away.
A failed write does not roll back memory: the in-memory list stays
authoritative and the failure goes to the notifier and ``last_error``.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from tasktrack.core.config import settings
from tasktrack.errors import (
    FormatError,
    StorageError,
    TaskTrackError,
    ValidationError,
    describe_validation_error,
)
from tasktrack.schemas.client_task import ClientTask, ClientTaskPatch, TaskForm
from tasktrack.services.task_query import (
    SortKey,
    StatusFilter,
    coerce_filter,
    coerce_sort,
    query_tasks,
)
from tasktrack.ui.local_storage import LocalStorage
from tasktrack.utils.json_format import compact_dumps, pretty_dumps
from tasktrack.utils.time import today_utc, utc_now

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


class ImportMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"


ModeChooser = Callable[[int], ImportMode]


def _importable_item(item: Any) -> Optional[dict]:
    """The item ready for validation, or None when it must be dropped.

    Numeric ids from older exports are kept as their decimal string.
    """
    if not isinstance(item, dict):
        return None
    task_id = item.get("id")
    if isinstance(task_id, int) and not isinstance(task_id, bool) and task_id:
        item = {**item, "id": str(task_id)}
    elif not (isinstance(task_id, str) and task_id):
        return None
    if not (isinstance(item.get("title"), str) and item["title"]):
        return None
    if not isinstance(item.get("completed"), bool):
        return None
    return item


def export_filename(today: Optional[date] = None) -> str:
    day = today or today_utc()
    return f"todo-tasks-{day.isoformat()}.json"


class ClientTaskStore:
    """Task list plus UI mode for one browser session."""

    def __init__(
        self,
        storage: LocalStorage,
        storage_key: Optional[str] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.storage = storage
        self.storage_key = storage_key or settings.CLIENT_STORAGE_KEY
        self.notifier = notifier

        self.tasks: List[ClientTask] = []
        self.current_filter = StatusFilter.ALL
        self.current_sort = SortKey.DATE_DESC
        self.search_text = ""
        self.editing_task_id: Optional[str] = None
        self.pending_delete_id: Optional[str] = None
        self.last_error: Optional[TaskTrackError] = None

    # ---- notifications / persistence ----

    def _notify(self, level: str, message: str) -> None:
        if self.notifier is not None:
            self.notifier(level, message)

    def _report(self, exc: TaskTrackError) -> None:
        self.last_error = exc
        logger.error("%s", exc.message)
        self._notify("error", exc.message)

    def load(self) -> List[ClientTask]:
        """Read the saved list. Absent or unreadable content yields an empty list."""
        self.tasks = []
        try:
            saved = self.storage.get_item(self.storage_key)
        except StorageError as exc:
            self._report(exc)
            return self.tasks
        if not saved:
            return self.tasks

        try:
            data = json.loads(saved)
        except json.JSONDecodeError:
            self._report(FormatError("saved tasks are not valid JSON"))
            return self.tasks
        if not isinstance(data, list):
            self._report(FormatError("saved tasks are not a list"))
            return self.tasks

        skipped = 0
        for item in data:
            try:
                self.tasks.append(ClientTask.model_validate(item))
            except PydanticValidationError:
                skipped += 1
        if skipped:
            logger.warning("Skipped %d unreadable saved tasks", skipped)
            self._notify("warning", f"skipped {skipped} unreadable saved tasks")
        return self.tasks

    def save(self) -> bool:
        """Write the full list. Returns False when the write failed."""
        try:
            self.storage.set_item(self.storage_key, compact_dumps([t.to_record() for t in self.tasks]))
        except StorageError as exc:
            self._report(exc)
            return False
        self.last_error = None
        return True

    # ---- CRUD ----

    def get(self, task_id: str) -> Optional[ClientTask]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def add(self, task: ClientTask) -> ClientTask:
        self.tasks.append(task)
        self.save()
        return task

    def update(self, task_id: str, fields: Union[ClientTaskPatch, dict]) -> Optional[ClientTask]:
        """
        Merge the given fields into the task. Unknown id is a silent no-op.

        The merged task is validated as a whole and swapped in only when it
        is valid, so a rejected patch leaves the stored task untouched.
        """
        patch = self._as_patch(fields)
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                break
        else:
            return None

        merged = {**task.model_dump(), **patch.changes(), "updated_at": utc_now()}
        try:
            updated = ClientTask.model_validate(merged)
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_error(exc)) from None
        self.tasks[index] = updated
        self.save()
        return updated

    def delete(self, task_id: str) -> bool:
        remaining = [t for t in self.tasks if t.id != task_id]
        if len(remaining) == len(self.tasks):
            return False
        self.tasks = remaining
        if self.editing_task_id == task_id:
            self.editing_task_id = None
        self.save()
        return True

    def toggle_completed(self, task_id: str) -> Optional[ClientTask]:
        task = self.get(task_id)
        if task is None:
            return None
        task.completed = not task.completed
        task.updated_at = utc_now()
        self.save()
        return task

    @staticmethod
    def _as_patch(fields: Union[ClientTaskPatch, dict]) -> ClientTaskPatch:
        if isinstance(fields, ClientTaskPatch):
            return fields
        try:
            return ClientTaskPatch.model_validate(fields)
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_error(exc)) from None

    # ---- list view ----

    def query(
        self,
        filter_status: Optional[StatusFilter | str] = None,
        search_text: Optional[str] = None,
        sort_key: Optional[SortKey | str] = None,
    ) -> List[ClientTask]:
        """Filtered, searched and sorted view; unset arguments use the current state."""
        return query_tasks(
            self.tasks,
            self.current_filter if filter_status is None else filter_status,
            self.search_text if search_text is None else search_text,
            self.current_sort if sort_key is None else sort_key,
        )

    def visible_tasks(self) -> List[ClientTask]:
        return self.query()

    def set_filter(self, value: StatusFilter | str) -> None:
        self.current_filter = coerce_filter(value)

    def set_sort(self, value: SortKey | str) -> None:
        self.current_sort = coerce_sort(value)

    def set_search(self, text: str) -> None:
        self.search_text = text or ""

    def active_count(self) -> int:
        return sum(1 for t in self.tasks if not t.completed)

    # ---- edit / delete-confirmation flow ----

    def start_edit(self, task_id: str) -> Optional[ClientTask]:
        task = self.get(task_id)
        if task is not None:
            self.editing_task_id = task_id
        return task

    def cancel_edit(self) -> None:
        self.editing_task_id = None

    def submit_form(self, form: Union[TaskForm, dict]) -> ClientTask:
        """Add a task, or update the one being edited, from the form values."""
        if not isinstance(form, TaskForm):
            try:
                form = TaskForm.model_validate(form)
            except PydanticValidationError as exc:
                raise ValidationError(describe_validation_error(exc)) from None
        if not form.title:
            raise ValidationError("title is required")

        values = form.model_dump()
        if self.editing_task_id is not None:
            task = self.update(self.editing_task_id, ClientTaskPatch(**values))
            self.editing_task_id = None
            if task is not None:
                self._notify("success", "task updated")
                return task
            # The edited task vanished meanwhile; fall through and add it anew.

        task = self.add(ClientTask(**values))
        self._notify("success", "task added")
        return task

    def request_delete(self, task_id: str) -> None:
        self.pending_delete_id = task_id

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    def confirm_delete(self) -> bool:
        if self.pending_delete_id is None:
            return False
        deleted = self.delete(self.pending_delete_id)
        self.pending_delete_id = None
        if deleted:
            self._notify("info", "task deleted")
        return deleted

    # ---- import / export ----

    def export_json(self) -> str:
        """The whole list as a 2-space indented JSON array."""
        return pretty_dumps([t.to_record() for t in self.tasks])

    def import_json(self, text: str, mode: Union[ImportMode, ModeChooser]) -> List[ClientTask]:
        """Parse an export file and import it. See :meth:`import_tasks`."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            error = FormatError("import file is not valid JSON")
            self._report(error)
            raise error from exc
        return self.import_tasks(data, mode)

    def import_tasks(self, raw: Any, mode: Union[ImportMode, ModeChooser]) -> List[ClientTask]:
        """
        Import tasks from a decoded JSON array.

        Elements without a non-empty id, a non-empty title and a boolean
        ``completed`` are dropped. When nothing survives the import is
        rejected with FormatError and the list is left untouched. ``mode``
        is either the decision itself or a callable that receives the number
        of importable tasks and returns it.
        """
        if not isinstance(raw, list):
            error = FormatError("import file must contain a JSON array")
            self._report(error)
            raise error

        valid: List[ClientTask] = []
        for raw_item in raw:
            item = _importable_item(raw_item)
            if item is None:
                continue
            try:
                valid.append(ClientTask.model_validate(item))
            except PydanticValidationError as exc:
                logger.debug("Dropping import item %r: %s", item.get("id"), describe_validation_error(exc))

        if not valid:
            error = FormatError("import file contains no valid tasks")
            self._report(error)
            raise error

        chosen = ImportMode(mode(len(valid)) if callable(mode) else mode)
        if chosen is ImportMode.REPLACE:
            self.tasks = valid
        else:
            self.tasks = [*self.tasks, *valid]
        logger.info("Imported %d tasks (%s)", len(valid), chosen.value)
        self.save()
        self._notify("success", f"imported {len(valid)} tasks")
        return valid
