"""Keeps a task row and its mirrored Google Calendar event in step."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from core.logging_setup import get_logger
from core.settings import CALENDAR
from models.results import StoreResult
from models.session import Session
from services.google_calendar import CalendarClient, CalendarError
from services.google_sync import build_event_payload
from services.task_store import TaskStore
from services.validation import TaskForm


CalendarFactory = Callable[[str], CalendarClient]


@dataclass(frozen=True)
class SyncOutcome:
    result: StoreResult
    # Set only by delete, where a calendar failure does not stop the row removal.
    calendar_error: Optional[CalendarError] = None

    @property
    def ok(self) -> bool:
        return self.result.ok and self.calendar_error is None


class SyncCoordinator:
    """
    Create / update / delete / complete for one signed-in user.

    The calendar call always finishes before the store call starts. The two
    writes are not transactional: when the store write fails after the event
    was written, the event stays in the calendar.
    """

    def __init__(
        self,
        session: Session,
        store: TaskStore,
        calendar_factory: CalendarFactory = CalendarClient,
        *,
        block_delete_on_calendar_error: bool = CALENDAR.block_delete_on_calendar_error,
    ):
        self.session = session
        self.store = store
        self.calendar = calendar_factory(session.provider_token)
        self.block_delete_on_calendar_error = block_delete_on_calendar_error
        self.logger = get_logger("sync")

    def _event_body(self, form: TaskForm) -> dict:
        return build_event_payload(form, self.session.time_zone)

    def create(self, form: TaskForm) -> SyncOutcome:
        """Raises :class:`CalendarError`; store failures come back in the outcome."""
        event_id: Optional[str] = None
        if self.session.has_calendar_token:
            event = self.calendar.create_event(self._event_body(form))
            event_id = event.get("id") or None

        result = self.store.insert(
            title=form.title,
            description=form.description,
            reminder_time=form.reminder_time,
            completed=form.completed,
            user_id=self.session.user.id,
            event_id=event_id,
        )
        if not result.ok and event_id:
            self.logger.warning("Task insert failed, calendar event %s left orphaned", event_id)
        return SyncOutcome(result)

    def update(self, task_id: int, existing_event_id: Optional[str], form: TaskForm) -> SyncOutcome:
        event_id = existing_event_id or None
        if self.session.has_calendar_token and existing_event_id:
            event = self.calendar.update_event(self._event_body(form), existing_event_id)
            event_id = event.get("id") or existing_event_id

        result = self.store.update(
            task_id,
            title=form.title,
            description=form.description,
            reminder_time=form.reminder_time,
            completed=form.completed,
            event_id=event_id,
        )
        if not result.ok and event_id:
            self.logger.warning("Task %s update failed after calendar event %s changed", task_id, event_id)
        return SyncOutcome(result)

    def delete(self, task_id: int, event_id: Optional[str]) -> SyncOutcome:
        calendar_error = None
        try:
            self.calendar.delete_event(event_id)
        except CalendarError as exc:
            if self.block_delete_on_calendar_error:
                raise
            self.logger.warning("Calendar delete of %s failed, deleting task %s anyway", event_id, task_id)
            calendar_error = exc
        return SyncOutcome(self.store.delete(task_id), calendar_error)

    def complete(self, task_id: int) -> SyncOutcome:
        return SyncOutcome(self.store.update(task_id, completed=True))


__all__ = ["CalendarFactory", "SyncCoordinator", "SyncOutcome"]
