"""
Task Pydantic schemas (REST API variant).

Field names on the wire are camelCase (createdAt, updatedAt); the
Python attributes are snake_case.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_serializer, field_validator, model_validator

from tasktrack.utils.time import ensure_utc, to_iso

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000


def _check_title(value: str) -> str:
    if not value.strip():
        raise ValueError("title is required")
    if len(value) > MAX_TITLE_LENGTH:
        raise ValueError(f"title may be at most {MAX_TITLE_LENGTH} characters")
    return value.strip()


def _check_description(value: str) -> str:
    if len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(f"description may be at most {MAX_DESCRIPTION_LENGTH} characters")
    return value


class TaskCreate(BaseModel):
    """Schema for creating a new task."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def require_object(cls, data: Any) -> Any:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        if data.get("title") is None:
            raise ValueError("title is required")
        if not isinstance(data["title"], str):
            raise ValueError("title must be a string")
        if data.get("description") is None:
            data = {**data, "description": ""}
        elif not isinstance(data["description"], str):
            raise ValueError("description must be a string")
        return data

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _check_description(v)


class TaskPatch(BaseModel):
    """
    Partial update for a task.

    Only the mutable attributes are accepted. id, createdAt, updatedAt and
    any unknown keys in the request are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[StrictBool] = None

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        if "completed" in data and not isinstance(data["completed"], bool):
            raise ValueError("completed must be a boolean")
        for name in ("title", "description"):
            if name in data and not isinstance(data[name], str):
                raise ValueError(f"{name} must be a string")
        return data

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("title must not be empty")
        return _check_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_description(v)

    def changes(self) -> dict:
        """Fields the caller actually supplied."""
        return self.model_dump(exclude_unset=True)


class TaskRead(BaseModel):
    """Schema for a stored task (API response and file record)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(..., ge=1)
    title: str
    description: str = ""
    completed: bool = False
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return v if v is None else ensure_utc(v)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, v: Optional[datetime]) -> Optional[str]:
        return v if v is None else to_iso(v)

    def to_record(self) -> dict:
        """Wire/file representation; updatedAt is absent until the first update."""
        return self.model_dump(by_alias=True, exclude_none=True)
