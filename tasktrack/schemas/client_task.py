"""
Task Pydantic schemas (browser store variant).

The client task carries more descriptive fields than the API task and uses
string ids generated on the client.
"""

import random
import string
import time
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from tasktrack.utils.time import ensure_utc, to_iso, utc_now

_ID_ALPHABET = string.digits + string.ascii_lowercase


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def generate_task_id() -> str:
    """Epoch milliseconds followed by nine random base-36 characters."""
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}{suffix}"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ClientTask(BaseModel):
    """A task as held in the browser store and written to export files."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(default_factory=generate_task_id, min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    assignee: str = ""
    priority: Priority = Priority.MEDIUM
    deadline: Optional[date] = None
    category: str = ""
    completed: bool = False
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    @field_validator("deadline", mode="before")
    @classmethod
    def empty_deadline(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, v: datetime) -> str:
        return to_iso(v)

    @field_serializer("deadline")
    def serialize_deadline(self, v: Optional[date]) -> str:
        # Stored as "" when unset, matching what the form produces.
        return v.isoformat() if v else ""

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ClientTaskPatch(BaseModel):
    """
    Editable attributes of a client task.

    Every field is optional; only the ones given are merged into the task.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    assignee: Optional[str] = None
    priority: Optional[Priority] = None
    deadline: Optional[date] = None
    category: Optional[str] = None
    completed: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        # Only deadline can be cleared; every other field keeps a value.
        if isinstance(data, dict):
            for name, value in data.items():
                if value is None and name != "deadline":
                    raise ValueError(f"{name} must not be null")
        return data

    @field_validator("deadline", mode="before")
    @classmethod
    def empty_deadline(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("title is required")
        return v

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class TaskForm(BaseModel):
    """Raw values of the add/edit form. Strings are trimmed on the way in."""

    title: str = ""
    description: str = ""
    assignee: str = ""
    priority: Priority = Priority.MEDIUM
    deadline: Optional[date] = None
    category: str = ""

    @field_validator("title", "description", "assignee", "category", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("deadline", mode="before")
    @classmethod
    def empty_deadline(cls, v: Any) -> Any:
        return _blank_to_none(v)
