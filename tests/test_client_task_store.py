"""Tests for the browser task store (no DOM, in-memory local storage)."""

import json
from datetime import date

import pytest

from tasktrack.errors import FormatError, StorageError, ValidationError
from tasktrack.schemas.client_task import ClientTask, Priority, generate_task_id
from tasktrack.ui.local_storage import MemoryLocalStorage
from tasktrack.ui.task_store import ClientTaskStore, ImportMode, export_filename

pytestmark = pytest.mark.unit


class FailingStorage(MemoryLocalStorage):
    def set_item(self, key, value):
        raise StorageError("quota exceeded")


def saved_records(local_storage, key="todoTasks"):
    return json.loads(local_storage.get_item(key))


def test_generated_ids_are_time_plus_suffix():
    first, second = generate_task_id(), generate_task_id()
    assert first != second
    assert first[:13].isdigit()
    assert len(first) == 13 + 9


def test_add_persists_immediately(store, local_storage):
    task = store.add(ClientTask(title="Water plants"))

    [record] = saved_records(local_storage)
    assert record["id"] == task.id
    assert record["priority"] == "medium"
    assert record["deadline"] == ""
    assert record["completed"] is False
    assert {"createdAt", "updatedAt"} <= set(record)


def test_update_merges_fields_and_refreshes_updated_at(store, local_storage):
    task = store.add(ClientTask(title="Draft", category="home"))
    before = task.updated_at

    updated = store.update(task.id, {"title": "Final", "priority": "high", "deadline": "2024-03-01"})

    assert store.get(task.id) is updated
    assert updated.title == "Final"
    assert updated.priority is Priority.HIGH
    assert updated.deadline == date(2024, 3, 1)
    assert updated.category == "home"
    assert updated.created_at == task.created_at
    assert updated.updated_at >= before
    assert saved_records(local_storage)[0]["title"] == "Final"


def test_update_can_clear_deadline(store):
    task = store.add(ClientTask(title="Due", deadline=date(2024, 3, 1)))

    assert store.update(task.id, {"deadline": None}).deadline is None
    assert store.update(task.id, {"deadline": ""}).deadline is None


def test_update_with_null_field_changes_nothing(store, local_storage):
    task = store.add(ClientTask(title="Keep", description="original"))
    before = task.updated_at

    with pytest.raises(ValidationError, match="description must not be null"):
        store.update(task.id, {"title": "Changed", "description": None})

    current = store.get(task.id)
    assert current.title == "Keep"
    assert current.description == "original"
    assert current.updated_at == before
    assert saved_records(local_storage)[0]["title"] == "Keep"


def test_update_rejects_non_object_patch(store):
    task = store.add(ClientTask(title="Keep"))
    with pytest.raises(ValidationError):
        store.update(task.id, ["title", "x"])
    assert store.get(task.id).title == "Keep"


def test_update_unknown_id_is_silent(store):
    store.add(ClientTask(title="Only"))
    assert store.update("missing", {"title": "x"}) is None


def test_update_rejects_blank_title(store):
    task = store.add(ClientTask(title="Keep"))
    with pytest.raises(ValidationError):
        store.update(task.id, {"title": "  "})
    assert task.title == "Keep"


def test_update_rejects_unknown_field(store):
    task = store.add(ClientTask(title="Keep"))
    with pytest.raises(ValidationError):
        store.update(task.id, {"id": "other"})
    assert store.get(task.id) is task


def test_delete_and_toggle(store, local_storage):
    keep = store.add(ClientTask(title="keep"))
    drop = store.add(ClientTask(title="drop"))

    assert store.delete(drop.id) is True
    assert store.delete(drop.id) is False
    assert [r["id"] for r in saved_records(local_storage)] == [keep.id]

    store.toggle_completed(keep.id)
    assert keep.completed is True
    assert saved_records(local_storage)[0]["completed"] is True
    assert store.toggle_completed("missing") is None


def test_query_uses_current_state(store):
    store.add(ClientTask(title="Buy bread"))
    done = store.add(ClientTask(title="Buy milk", completed=True))
    store.add(ClientTask(title="Call mum"))

    store.set_filter("completed")
    assert store.visible_tasks() == [done]

    store.set_filter("all")
    store.set_search("buy")
    assert {t.title for t in store.visible_tasks()} == {"Buy bread", "Buy milk"}
    assert store.active_count() == 2

    with pytest.raises(ValidationError):
        store.set_sort("size")


def test_export_then_replace_import_round_trips(store, local_storage):
    store.add(ClientTask(title="One", assignee="Ala", priority="high", deadline="2024-05-01"))
    store.add(ClientTask(title="Two", completed=True, category="home"))
    original = [t.model_copy() for t in store.tasks]
    exported = store.export_json()

    assert exported.startswith("[\n  {")

    other = ClientTaskStore(MemoryLocalStorage())
    other.add(ClientTask(title="stale"))
    other.import_json(exported, ImportMode.REPLACE)

    assert other.tasks == original
    assert json.loads(other.export_json()) == json.loads(exported)


def test_import_append_keeps_existing(store):
    existing = store.add(ClientTask(title="existing"))
    payload = [{"id": "imp-1", "title": "imported", "completed": False}]

    store.import_tasks(payload, ImportMode.APPEND)

    assert [t.id for t in store.tasks] == [existing.id, "imp-1"]


def test_import_accepts_numeric_ids_as_strings(store):
    payload = [
        {"id": 1700000000000, "title": "numeric", "completed": False},
        {"id": 0, "title": "zero id", "completed": False},
        {"id": True, "title": "bool id", "completed": False},
    ]

    [task] = store.import_tasks(payload, ImportMode.REPLACE)

    assert task.id == "1700000000000"
    assert store.get("1700000000000") is task
    assert payload[0]["id"] == 1700000000000


def test_import_mode_chooser_receives_count(store):
    seen = []

    def choose(count):
        seen.append(count)
        return ImportMode.REPLACE

    store.import_tasks(
        [
            {"id": "a", "title": "A", "completed": True},
            {"id": "", "title": "no id", "completed": False},
            {"id": "b", "title": "", "completed": False},
            {"id": "c", "title": "C", "completed": "no"},
            "junk",
            {"id": "d", "title": "D", "completed": False},
        ],
        choose,
    )

    assert seen == [2]
    assert [t.id for t in store.tasks] == ["a", "d"]


def test_import_with_no_valid_tasks_is_rejected(store, notifier):
    keep = store.add(ClientTask(title="keep"))

    with pytest.raises(FormatError):
        store.import_tasks([{"title": "no id", "completed": False}], ImportMode.REPLACE)

    assert store.tasks == [keep]
    assert "error" in notifier.levels()


@pytest.mark.parametrize("text", ['{"id": "a"}', "not json"])
def test_import_rejects_non_array_or_invalid_json(store, text):
    with pytest.raises(FormatError):
        store.import_json(text, ImportMode.REPLACE)


def test_storage_failure_is_non_fatal(notifier):
    store = ClientTaskStore(FailingStorage(), notifier=notifier)

    task = store.add(ClientTask(title="still here"))

    assert store.tasks == [task]
    assert isinstance(store.last_error, StorageError)
    assert notifier.messages == [("error", "quota exceeded")]


def test_load_round_trip_and_malformed(local_storage, notifier):
    first = ClientTaskStore(local_storage)
    first.add(ClientTask(title="persisted"))

    second = ClientTaskStore(local_storage)
    assert [t.title for t in second.load()] == ["persisted"]

    local_storage.set_item("todoTasks", "{broken")
    third = ClientTaskStore(local_storage, notifier=notifier)
    assert third.load() == []
    assert notifier.levels() == ["error"]


def test_load_absent_key_is_empty(store, notifier):
    assert store.load() == []
    assert notifier.messages == []


def test_submit_form_adds_then_edits(store):
    created = store.submit_form({"title": "  Plan trip ", "assignee": " Ewa ", "deadline": ""})
    assert created.title == "Plan trip"
    assert created.assignee == "Ewa"
    assert created.deadline is None

    assert store.start_edit(created.id) is created
    edited = store.submit_form({"title": "Plan holiday", "priority": "low", "deadline": "2024-07-01"})

    assert edited.id == created.id
    assert store.get(created.id) is edited
    assert edited.title == "Plan holiday"
    assert edited.priority is Priority.LOW
    assert store.editing_task_id is None
    assert len(store.tasks) == 1


def test_submit_form_requires_title(store):
    with pytest.raises(ValidationError, match="title is required"):
        store.submit_form({"title": "   "})
    assert store.tasks == []


def test_start_edit_unknown_id(store):
    assert store.start_edit("nope") is None
    assert store.editing_task_id is None


def test_delete_confirmation_flow(store):
    task = store.add(ClientTask(title="remove me"))

    assert store.confirm_delete() is False
    store.request_delete(task.id)
    store.cancel_delete()
    assert store.tasks == [task]

    store.request_delete(task.id)
    assert store.confirm_delete() is True
    assert store.tasks == []
    assert store.pending_delete_id is None


def test_export_filename():
    assert export_filename(date(2024, 2, 3)) == "todo-tasks-2024-02-03.json"
