from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from core.logging_setup import get_logger
from core.settings import CALENDAR


logger = get_logger("calendar")

EMPTY_EVENT: Dict[str, Any] = {"id": ""}


class CalendarError(Exception):
    """Failed Calendar API call: an error answer, a rejected token or a broken connection."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.reason = reason
        self.details = details or {}


def _error_payload(exc: HttpError) -> Dict[str, Any]:
    content = getattr(exc, "content", b"") or b""
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        data = json.loads(content)
    except (UnicodeDecodeError, ValueError):
        return {}
    error = data.get("error") if isinstance(data, dict) else None
    return error if isinstance(error, dict) else {}


def error_from_http(exc: HttpError) -> CalendarError:
    status = getattr(getattr(exc, "resp", None), "status", None)
    error = _error_payload(exc)
    errors = error.get("errors") or []
    reason = None
    if errors and isinstance(errors[0], dict):
        reason = errors[0].get("reason")
    message = error.get("message") or getattr(exc, "reason", None) or str(exc)
    try:
        status = int(error.get("code") or status)
    except (TypeError, ValueError):
        status = None
    return CalendarError(message, status=status, reason=reason, details=error)


class CalendarClient:
    """
    Create / update / delete events of one Google Calendar with a bearer token.
    Without a token (or without an event id for update/delete) no request is sent.
    """

    def __init__(self, token: str, calendar_id: str = CALENDAR.calendar_id, service: Any = None):
        self.token = token or ""
        self.calendar_id = calendar_id
        self.service = service

    def _events(self):
        if self.service is None:
            creds = Credentials(token=self.token)
            self.service = build("calendar", "v3", credentials=creds, cache_discovery=False)
        return self.service.events()

    def _execute(self, request, action: str):
        try:
            return request.execute()
        except HttpError as exc:
            error = error_from_http(exc)
            logger.warning("Calendar %s failed (%s): %s", action, error.status, error.message)
            raise error from exc
        except RefreshError as exc:
            # Token-only credentials cannot refresh; an expired token ends up here.
            logger.warning("Calendar %s failed, token rejected: %s", action, exc)
            raise CalendarError(str(exc) or "Access token expired", status=401, reason="authError") from exc
        except (TransportError, httplib2.HttpLib2Error, OSError) as exc:
            logger.warning("Calendar %s failed, no connection: %s", action, exc)
            raise CalendarError(str(exc) or "Calendar is unreachable", reason="transportError") from exc

    # ----- operations -----
    def create_event(self, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.token:
            return dict(EMPTY_EVENT)
        event = self._execute(
            self._events().insert(calendarId=self.calendar_id, body=body), "create"
        )
        logger.info("Calendar event created: %s", event.get("id"))
        return event

    def update_event(self, body: Dict[str, Any], event_id: Optional[str] = None) -> Dict[str, Any]:
        if not self.token or not event_id:
            return dict(EMPTY_EVENT)
        event = self._execute(
            self._events().update(calendarId=self.calendar_id, eventId=event_id, body=body),
            "update",
        )
        logger.info("Calendar event updated: %s", event_id)
        return event

    def delete_event(self, event_id: Optional[str] = None) -> None:
        if not self.token or not event_id:
            return None
        self._execute(
            self._events().delete(calendarId=self.calendar_id, eventId=event_id), "delete"
        )
        logger.info("Calendar event deleted: %s", event_id)
        return None


__all__ = ["CalendarClient", "CalendarError", "EMPTY_EVENT", "error_from_http"]
