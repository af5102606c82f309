"""Task table access with row-change notifications."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.logging_setup import get_logger
from datetime_utils import ensure_utc
from models.results import DELETE, INSERT, UPDATE, ChangeEvent, StoreResult
from models.task import Task
from storage.db import get_session


ChangeListener = Callable[[ChangeEvent], None]

_DATETIME_FIELDS = ("reminder_time", "created_at")


def _normalize_fields(fields: dict) -> dict:
    data = dict(fields)
    for key in _DATETIME_FIELDS:
        if isinstance(data.get(key), datetime):
            data[key] = ensure_utc(data[key])
    return data


def _record(task: Optional[Task]) -> dict:
    if task is None:
        return {}
    return task.model_dump()


class Subscription:
    """Handle returned by :meth:`TaskStore.subscribe`."""

    def __init__(self, store: "TaskStore", callback: ChangeListener):
        self._store = store
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._store._remove_listener(self.callback)
            self.active = False


class TaskStore:
    """Query / insert / update / delete on the ``task`` table.

    Every call returns a :class:`StoreResult`; database failures come back as
    a ``StoreError`` value instead of an exception. Successful writes are
    broadcast to every subscriber regardless of the row owner, row visibility
    is enforced by the queries themselves.
    """

    table = Task.__tablename__

    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory
        self._listeners: List[ChangeListener] = []
        self.logger = get_logger("store")

    # ----- change notifications -----
    def subscribe(self, callback: ChangeListener) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self, callback)

    def _remove_listener(self, callback: ChangeListener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def _emit(self, change_type: str, record: dict, old_record: Optional[dict] = None) -> None:
        event = ChangeEvent(type=change_type, table=self.table, record=record, old_record=old_record or {})
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                self.logger.exception("Change listener failed for %s", change_type)

    def _failure(self, action: str, exc: SQLAlchemyError) -> StoreResult:
        details = str(getattr(exc, "orig", None) or exc)
        self.logger.error("Store %s failed: %s", action, details)
        return StoreResult.failure(f"Could not {action} task", details, code=exc.__class__.__name__)

    # ----- queries -----
    def select_range(self, start: datetime, end: datetime, user_id: str) -> StoreResult[List[Task]]:
        """Rows of ``user_id`` with ``start <= reminder_time <= end``, earliest first."""
        lower, upper = ensure_utc(start), ensure_utc(end)
        try:
            with self._session_factory() as session:
                stmt = (
                    select(Task)
                    .where(Task.user_id == user_id)
                    .where(Task.reminder_time >= lower)
                    .where(Task.reminder_time <= upper)
                    .order_by(Task.reminder_time.asc())
                )
                rows = list(session.exec(stmt))
        except SQLAlchemyError as exc:
            return self._failure("load", exc)
        return StoreResult.success(rows)

    # ----- writes -----
    def insert(self, **fields) -> StoreResult[Task]:
        try:
            with self._session_factory() as session:
                task = Task(**_normalize_fields(fields))
                session.add(task)
                session.commit()
                session.refresh(task)
        except SQLAlchemyError as exc:
            return self._failure("create", exc)
        self.logger.debug("Task inserted: %s", task.id)
        self._emit(INSERT, _record(task))
        return StoreResult.success(task)

    def update(self, task_id: int, **fields) -> StoreResult[Task]:
        try:
            with self._session_factory() as session:
                task = session.get(Task, task_id)
                if task is None:
                    return StoreResult.failure(
                        "Could not update task", f"Task {task_id} not found", code="not_found"
                    )
                old = _record(task)
                for key, value in _normalize_fields(fields).items():
                    setattr(task, key, value)
                session.add(task)
                session.commit()
                session.refresh(task)
        except SQLAlchemyError as exc:
            return self._failure("update", exc)
        self.logger.debug("Task updated: %s", task_id)
        self._emit(UPDATE, _record(task), old)
        return StoreResult.success(task)

    def delete(self, task_id: int) -> StoreResult[None]:
        try:
            with self._session_factory() as session:
                task = session.get(Task, task_id)
                if task is None:
                    return StoreResult.success(None)
                old = _record(task)
                session.delete(task)
                session.commit()
        except SQLAlchemyError as exc:
            return self._failure("delete", exc)
        self.logger.debug("Task deleted: %s", task_id)
        self._emit(DELETE, {}, old)
        return StoreResult.success(None)


__all__ = ["ChangeListener", "Subscription", "TaskStore"]
