"""Task ↔ Google Calendar field mapping."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict

from datetime_utils import ensure_utc, to_rfc3339_utc
from services.validation import TaskForm


# Every mirrored event lasts exactly this long after the reminder time.
EVENT_DURATION = timedelta(hours=1)


def event_end(reminder_time: datetime) -> datetime:
    return reminder_time + EVENT_DURATION


def build_event_payload(form: TaskForm, time_zone: str) -> Dict[str, Any]:
    """Event body for a task form: summary/description, start and start + 1h."""
    start = ensure_utc(form.reminder_time)
    end = event_end(start)
    return {
        "summary": form.title,
        "description": form.description,
        "start": {"dateTime": to_rfc3339_utc(start), "timeZone": time_zone},
        "end": {"dateTime": to_rfc3339_utc(end), "timeZone": time_zone},
    }


__all__ = [
    "EVENT_DURATION",
    "build_event_payload",
    "event_end",
]
