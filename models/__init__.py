"""ORM models and value types exposed by the Taskboard application."""
from .task import Task
from .results import ChangeEvent, StoreError, StoreResult
from .session import AuthUser, Session

__all__ = ["AuthUser", "ChangeEvent", "Session", "StoreError", "StoreResult", "Task"]
