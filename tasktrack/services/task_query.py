"""
Filter, search and sort helpers for the browser task list.

These never mutate the list they are given; they return a new view.
"""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from enum import Enum
from typing import Iterable, List

from pyuca import Collator

from tasktrack.errors import ValidationError
from tasktrack.schemas.client_task import PRIORITY_RANK, ClientTask


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortKey(str, Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    PRIORITY = "priority"
    ASSIGNEE = "assignee"
    DEADLINE = "deadline"


def coerce_filter(value: StatusFilter | str) -> StatusFilter:
    try:
        return StatusFilter(value)
    except ValueError:
        raise ValidationError(f"unknown filter: {value}") from None


def coerce_sort(value: SortKey | str) -> SortKey:
    try:
        return SortKey(value)
    except ValueError:
        raise ValidationError(f"unknown sort key: {value}") from None


def filter_by_status(tasks: Iterable[ClientTask], status: StatusFilter | str) -> List[ClientTask]:
    status = coerce_filter(status)
    if status is StatusFilter.ACTIVE:
        return [t for t in tasks if not t.completed]
    if status is StatusFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    return list(tasks)


def matches_search(task: ClientTask, search_text: str) -> bool:
    """Case-insensitive substring match on title, description, assignee or category."""
    needle = search_text.strip().casefold()
    if not needle:
        return True
    haystacks = (task.title, task.description, task.assignee, task.category)
    return any(needle in (value or "").casefold() for value in haystacks)


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def _assignee_key(task: ClientTask):
    # Unicode Collation Algorithm order; the raw name breaks exact ties.
    name = task.assignee or ""
    return (_collator().sort_key(name), name)


def _deadline_key(task: ClientTask):
    # Tasks without a deadline go last; among themselves they keep their order.
    if task.deadline is None:
        return (1, date.min)
    return (0, task.deadline)


def sort_tasks(tasks: Iterable[ClientTask], sort_key: SortKey | str) -> List[ClientTask]:
    """Stable sort by the chosen key."""
    sort_key = coerce_sort(sort_key)
    items = list(tasks)
    if sort_key is SortKey.DATE_ASC:
        return sorted(items, key=lambda t: t.created_at)
    if sort_key is SortKey.DATE_DESC:
        return sorted(items, key=lambda t: t.created_at, reverse=True)
    if sort_key is SortKey.PRIORITY:
        return sorted(items, key=lambda t: -PRIORITY_RANK[t.priority])
    if sort_key is SortKey.ASSIGNEE:
        return sorted(items, key=_assignee_key)
    return sorted(items, key=_deadline_key)


def query_tasks(
    tasks: Iterable[ClientTask],
    status: StatusFilter | str = StatusFilter.ALL,
    search_text: str = "",
    sort_key: SortKey | str = SortKey.DATE_DESC,
) -> List[ClientTask]:
    """Filter by status, then by search text, then sort."""
    filtered = [t for t in filter_by_status(tasks, status) if matches_search(t, search_text)]
    return sort_tasks(filtered, sort_key)


def is_overdue(task: ClientTask, today: date) -> bool:
    return task.deadline is not None and not task.completed and task.deadline < today
