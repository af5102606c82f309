"""Authenticated user context passed into the dashboard and sync layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: Optional[str] = None
    provider: str = "google"


@dataclass(frozen=True)
class Session:
    user: AuthUser
    # Calendar-scoped bearer token; empty when the provider did not issue one.
    provider_token: str = ""
    time_zone: str = "UTC"

    @property
    def has_calendar_token(self) -> bool:
        return bool(self.provider_token)


__all__ = ["AuthUser", "Session"]
