"""Dashboard controller: the task list of one day and the user actions on it."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.logging_setup import get_logger
from datetime_utils import UTC, day_bounds_utc, ensure_utc, utc_now
from models.results import ChangeEvent, StoreError, StoreResult
from models.session import Session
from models.task import Task
from services.linkify import Segment, tokenize
from services.task_store import Subscription, TaskStore
from services.task_sync import SyncCoordinator, SyncOutcome
from services.validation import FieldError, TaskForm, ValidationResult, validate_task_form


Notifier = Callable[[str, str], None]

# modal modes
CREATE = "create"
EDIT = "edit"
DUPLICATE = "duplicate"

# modal states
CLOSED = "closed"
OPEN = "open"
SUBMITTING = "submitting"


def _zone(name: Optional[str]):
    try:
        return ZoneInfo(name) if name else UTC
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def due_label(task: Task, time_zone: Optional[str]) -> str:
    """Reminder time as ``h:mm:ss AM`` in the viewer's zone."""
    local = ensure_utc(task.reminder_time).astimezone(_zone(time_zone))
    return local.strftime("%I:%M:%S %p").lstrip("0")


@dataclass(frozen=True)
class TaskCard:
    id: int
    title: str
    description: str
    segments: Tuple[Segment, ...]
    due: str
    completed: bool
    event_id: Optional[str]

    @property
    def show_actions(self) -> bool:
        # Completed tasks hide edit/delete/done; the store does not enforce it.
        return not self.completed


def form_defaults(task: Optional[Task], mode: str, time_zone: Optional[str], now: Optional[datetime] = None) -> Dict[str, Any]:
    zone = _zone(time_zone)
    if task is None:
        return {
            "title": "",
            "description": "",
            "reminder_time": (now or utc_now()).astimezone(zone).replace(microsecond=0),
            "completed": False,
        }
    return {
        "title": task.title,
        "description": task.description,
        "reminder_time": ensure_utc(task.reminder_time).astimezone(zone),
        "completed": bool(task.completed) if mode == EDIT else False,
    }


class DashboardController:
    """
    Owns the visible task list for the selected day.

    ``load()`` replaces the list wholesale on success and keeps it on failure.
    Every user action goes through the :class:`SyncCoordinator`; failures
    are caught here and reported once through ``notify``.
    """

    def __init__(
        self,
        session: Session,
        store: TaskStore,
        coordinator: Optional[SyncCoordinator] = None,
        *,
        notify: Optional[Notifier] = None,
        on_tasks_changed: Optional[Callable[[List[Task]], None]] = None,
        on_sign_out: Optional[Callable[[], None]] = None,
        selected_date: Optional[date] = None,
    ):
        self.session = session
        self.store = store
        self.sync = coordinator or SyncCoordinator(session, store)
        self.notify: Notifier = notify or (lambda title, description: None)
        self.on_tasks_changed = on_tasks_changed
        self.on_sign_out = on_sign_out
        self.selected_date = selected_date or utc_now().date()
        self.tasks: List[Task] = []
        self.error: Optional[StoreError] = None
        self._subscription: Optional[Subscription] = None
        self.logger = get_logger("dashboard")

    # ----- loading -----
    def day_window(self, day: Optional[date] = None) -> Tuple[datetime, datetime]:
        return day_bounds_utc(day or self.selected_date)

    def load(self) -> StoreResult[List[Task]]:
        start, end = self.day_window()
        result = self.store.select_range(start, end, self.session.user.id)
        if not result.ok:
            self.error = result.error
            self.notify(result.error.message, result.error.details)
            return result
        self.error = None
        self.tasks = list(result.data or [])
        if self.on_tasks_changed:
            self.on_tasks_changed(self.tasks)
        return result

    def set_date(self, day: date) -> None:
        self.selected_date = day
        self.load()

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def mount(self) -> None:
        if self._subscription is None:
            self._subscription = self.store.subscribe(self._on_store_change)
        self.load()

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_store_change(self, event: ChangeEvent) -> None:
        self.logger.debug("%s on %s, reloading", event.type, event.table)
        self.load()

    def cards(self) -> List[TaskCard]:
        return [
            TaskCard(
                id=task.id,
                title=task.title,
                description=task.description,
                segments=tuple(tokenize(task.description)),
                due=due_label(task, self.session.time_zone),
                completed=bool(task.completed),
                event_id=task.event_id,
            )
            for task in self.tasks
        ]

    # ----- dispatch -----
    def _report(self, outcome: SyncOutcome, title: str, description: str) -> bool:
        if not outcome.result.ok:
            error = outcome.result.error
            self.notify(error.message, error.details)
            return False
        if outcome.calendar_error is not None:
            self.notify(title, f"{description}, but the calendar event could not be removed: "
                               f"{outcome.calendar_error.message}")
        else:
            self.notify(title, description)
        if not self.mounted:
            self.load()
        return True

    def _run(self, action: str, call: Callable[[], SyncOutcome], title: str, description: str) -> bool:
        try:
            outcome = call()
        except Exception as exc:
            self.logger.exception("Task %s failed", action)
            self.notify("Error", getattr(exc, "message", None) or str(exc))
            return False
        return self._report(outcome, title, description)

    def create(self, form: TaskForm) -> bool:
        return self._run("create", lambda: self.sync.create(form), "Task created", "Task has been created")

    def duplicate(self, task: Task, form: TaskForm) -> bool:
        self.logger.debug("Duplicating task %s", task.id)
        return self.create(form)

    def edit(self, task: Task, form: TaskForm) -> bool:
        return self._run(
            "update",
            lambda: self.sync.update(task.id, task.event_id, form),
            "Task updated",
            "Task has been updated",
        )

    def complete(self, task: Task) -> bool:
        return self._run(
            "complete",
            lambda: self.sync.complete(task.id),
            "Task completed",
            "Task has been marked as completed",
        )

    def delete(self, task: Task) -> bool:
        return self._run(
            "delete",
            lambda: self.sync.delete(task.id, task.event_id),
            "Task deleted",
            "Task has been deleted",
        )

    def sign_out(self) -> None:
        self.unmount()
        if self.on_sign_out:
            self.on_sign_out()

    def modal(self, mode: str, task: Optional[Task] = None) -> "TaskModal":
        return TaskModal(self, mode, task)


class TaskModal:
    """Create / edit / duplicate dialog: ``closed -> open -> submitting -> closed``."""

    def __init__(self, controller: DashboardController, mode: str, task: Optional[Task] = None):
        if mode not in (CREATE, EDIT, DUPLICATE):
            raise ValueError(f"Unsupported mode: {mode}")
        if mode != CREATE and task is None:
            raise ValueError(f"{mode} needs a task")
        self.controller = controller
        self.mode = mode
        self.task = task
        self.state = CLOSED
        self.values: Dict[str, Any] = {}
        self.errors: Tuple[FieldError, ...] = ()

    @property
    def title(self) -> str:
        return "Edit Task" if self.mode == EDIT else "Create Task"

    @property
    def shows_status_field(self) -> bool:
        return self.mode == EDIT

    def error_for(self, field: str) -> Optional[str]:
        for error in self.errors:
            if error.field == field:
                return error.message
        return None

    def open(self) -> None:
        self.values = form_defaults(self.task, self.mode, self.controller.session.time_zone)
        self.errors = ()
        self.state = OPEN

    def cancel(self) -> None:
        if self.state == OPEN:
            self.state = CLOSED
            self.errors = ()

    def submit(self, values: Dict[str, Any]) -> ValidationResult:
        if self.state != OPEN:
            raise RuntimeError(f"Cannot submit a {self.state} task dialog")
        result = validate_task_form(values, time_zone=self.controller.session.time_zone)
        if not result.ok:
            self.values = dict(values)
            self.errors = result.errors
            return result

        self.state = SUBMITTING
        try:
            if self.mode == EDIT:
                self.controller.edit(self.task, result.value)
            elif self.mode == DUPLICATE:
                self.controller.duplicate(self.task, result.value)
            else:
                self.controller.create(result.value)
        finally:
            self.state = CLOSED
            self.errors = ()
        return result


__all__ = [
    "CLOSED",
    "CREATE",
    "DUPLICATE",
    "DashboardController",
    "EDIT",
    "OPEN",
    "SUBMITTING",
    "TaskCard",
    "TaskModal",
    "due_label",
    "form_defaults",
]
