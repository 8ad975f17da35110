"""Task models shared by the scheduler backends.

Pydantic models describe what the caller wants registered; the native
scheduler remains the system of record, so nothing here is persisted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from aui_backend.errors import InvalidArgument


class Recurrence(str, Enum):
    """How often a registered task fires."""

    ONCE = "once"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Recurrence":
        """Parse a front-end token. Unrecognized tokens fall back to ONCE."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.ONCE


def _single_line_value(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("must not be empty")
    if any(c in value for c in "\r\n\0"):
        raise ValueError("must not contain line breaks")
    return value


def validate_task_name(value: str) -> str:
    """Return the stripped task name or raise ValueError.

    A name is one path segment inside the application's namespace, so it
    may not contain line breaks or path separators.
    """
    value = _single_line_value(value)
    if "\\" in value or "/" in value:
        raise ValueError("must not contain path separators")
    return value


def require_task_name(value: str) -> str:
    """validate_task_name for callers outside pydantic.

    Raises:
        InvalidArgument: The name is empty or not a single path segment.
    """
    try:
        return validate_task_name(value)
    except ValueError as e:
        raise InvalidArgument(f"Invalid task name {value!r}: {e}") from e


class TaskSpec(BaseModel):
    """A recurring task to register with the native scheduler."""

    name: str = Field(description="Unique key within the application's namespace")
    script_reference: str = Field(description="Path of the script to run")
    start_time: str = Field(default="", description="24-hour HH:MM trigger time")
    start_date: str = Field(
        default="", description="Optional start date, passed through verbatim"
    )
    recurrence: Recurrence = Recurrence.ONCE

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return validate_task_name(value)

    @field_validator("script_reference")
    @classmethod
    def _single_line(cls, value: str) -> str:
        return _single_line_value(value)

    @field_validator("start_time", "start_date")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = (value or "").strip()
        if any(c in value for c in "\r\n\0"):
            raise ValueError("must not contain line breaks")
        return value

    @field_validator("recurrence", mode="before")
    @classmethod
    def _tolerant_recurrence(cls, value):
        if isinstance(value, Recurrence):
            return value
        return Recurrence.parse(value)


@dataclass
class OwnedTaskEntry:
    """A native scheduler entry that carries this application's marker.

    ``raw`` is the entry exactly as the scheduler reported it; ``schedule``
    is the cron expression (Text backend) or the next run time (Structured
    backend) and may be empty.
    """

    name: str
    raw: str
    schedule: str = ""
    command: str = ""
