"""Value types returned by the task store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass(frozen=True)
class StoreError:
    """A failed store call. Returned to callers, never raised."""

    message: str
    details: str = ""
    code: Optional[str] = None


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "StoreResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, message: str, details: str = "", code: Optional[str] = None) -> "StoreResult[T]":
        return cls(error=StoreError(message=message, details=details, code=code))


@dataclass(frozen=True)
class ChangeEvent:
    """Row-level change notification for the task table."""

    type: str
    table: str
    record: dict[str, Any] = field(default_factory=dict)
    old_record: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "ChangeEvent",
    "DELETE",
    "INSERT",
    "StoreError",
    "StoreResult",
    "UPDATE",
]
