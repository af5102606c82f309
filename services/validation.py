"""Task form validation.

``validate_task_form`` never raises for bad input; it returns either a
:class:`ValidForm` carrying a :class:`TaskForm`, or an :class:`InvalidForm`
listing one :class:`FieldError` per offending field. Nothing reaches the
store or the calendar until the form is valid.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple, Union

from datetime_utils import localize


TITLE_MIN_LENGTH = 2
DESCRIPTION_MIN_LENGTH = 10

TITLE_TOO_SHORT = f"Task title must be at least {TITLE_MIN_LENGTH} characters."
DESCRIPTION_TOO_SHORT = f"Task description must be at least {DESCRIPTION_MIN_LENGTH} characters."
REMINDER_INVALID = "Reminder time must be a valid date and time."
COMPLETED_INVALID = "Status must be either done or not done."


@dataclass(frozen=True)
class TaskForm:
    title: str
    description: str
    reminder_time: datetime
    completed: bool = False


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class ValidForm:
    value: TaskForm
    ok: bool = True


@dataclass(frozen=True)
class InvalidForm:
    errors: Tuple[FieldError, ...]
    ok: bool = False


ValidationResult = Union[ValidForm, InvalidForm]


def _parse_reminder(value: Any, time_zone: Optional[str]) -> Optional[datetime]:
    if isinstance(value, datetime):
        return localize(value, time_zone)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return localize(datetime.fromisoformat(text), time_zone)
        except ValueError:
            return None
    return None


def validate_task_form(values: Mapping[str, Any], *, time_zone: Optional[str] = None) -> ValidationResult:
    """Check raw form values; naive reminder times are read in ``time_zone``."""
    errors = []

    title = values.get("title")
    if not isinstance(title, str) or len(title) < TITLE_MIN_LENGTH:
        errors.append(FieldError("title", TITLE_TOO_SHORT))

    description = values.get("description")
    if not isinstance(description, str) or len(description) < DESCRIPTION_MIN_LENGTH:
        errors.append(FieldError("description", DESCRIPTION_TOO_SHORT))

    reminder_time = _parse_reminder(values.get("reminder_time"), time_zone)
    if reminder_time is None:
        errors.append(FieldError("reminder_time", REMINDER_INVALID))

    completed = values.get("completed", False)
    if not isinstance(completed, bool):
        errors.append(FieldError("completed", COMPLETED_INVALID))

    if errors:
        return InvalidForm(errors=tuple(errors))
    return ValidForm(
        value=TaskForm(
            title=title,
            description=description,
            reminder_time=reminder_time,
            completed=completed,
        )
    )


__all__ = [
    "FieldError",
    "InvalidForm",
    "TaskForm",
    "ValidForm",
    "ValidationResult",
    "validate_task_form",
]
