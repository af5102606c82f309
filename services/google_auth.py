# taskboard/services/google_auth.py
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from core.logging_setup import get_logger
from core.settings import CALENDAR, CLIENT_SECRET_PATH, SESSION_PATH, TOKEN_PATH
from datetime_utils import local_time_zone_name
from models.session import AuthUser, Session


SCOPES = list(CALENDAR.scopes)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthListener = Callable[[str, Optional[Session]], None]


class AuthSubscription:
    def __init__(self, auth: "GoogleAuth", callback: AuthListener):
        self._auth = auth
        self.callback = callback

    def unsubscribe(self) -> None:
        self._auth._remove_listener(self.callback)


def _write_atomic(path: Path, data: str) -> None:
    tmp_path = path.with_suffix(".tmp")
    try:
        tmp_path.write_text(data, encoding="utf-8")
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


class GoogleAuth:
    """
    Google sign-in and the persisted session.

    The Google access token doubles as the calendar bearer token. A Google
    session without a token is invalid and gets signed out on load. Expired
    tokens are not refreshed; they fail at the calendar call.
    """

    def __init__(
        self,
        secrets_path: str | Path = CLIENT_SECRET_PATH,
        token_path: str | Path = TOKEN_PATH,
        session_path: str | Path = SESSION_PATH,
        *,
        time_zone: Optional[str] = CALENDAR.default_time_zone,
    ):
        self.secrets_path = Path(secrets_path)
        self.token_path = Path(token_path)
        self.session_path = Path(session_path)
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.session_path.parent.mkdir(parents=True, exist_ok=True)
        self.time_zone = local_time_zone_name(time_zone)
        self.creds: Optional[Credentials] = None
        self._listeners: List[AuthListener] = []
        self.logger = get_logger("auth")

    # ----- state change stream -----
    def on_auth_state_change(self, callback: AuthListener) -> AuthSubscription:
        self._listeners.append(callback)
        return AuthSubscription(self, callback)

    def _remove_listener(self, callback: AuthListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self, event: str, session: Optional[Session]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                self.logger.exception("Auth listener failed for %s", event)

    # ----- session -----
    def sign_in(self) -> Session:
        if not self.secrets_path.exists():
            raise FileNotFoundError(
                f"{self.secrets_path} not found. "
                "Create a Desktop OAuth client in Google Cloud and download its JSON."
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(self.secrets_path), SCOPES)
        self._log("Running OAuth consent flow (local server)")
        creds = flow.run_local_server(
            port=0,
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        if not creds or not self._has_required_scopes(creds):
            raise RuntimeError("Google sign-in did not grant calendar access")

        profile = self._fetch_profile(creds)
        user = AuthUser(id=str(profile["id"]), email=profile.get("email"), provider=CALENDAR.provider)
        self.creds = creds
        _write_atomic(self.token_path, creds.to_json())
        _write_atomic(self.session_path, json.dumps(
            {"id": user.id, "email": user.email, "provider": user.provider}, ensure_ascii=False
        ))
        self._log_active_scopes(creds.scopes)

        session = Session(user=user, provider_token=creds.token or "", time_zone=self.time_zone)
        self._emit(SIGNED_IN, session)
        return session

    def get_current_session(self) -> Optional[Session]:
        user = self._load_user()
        if user is None:
            return None
        token = self._load_token()
        if user.provider == CALENDAR.provider and not token:
            self._log("Google session has no provider token; signing out")
            self.sign_out()
            return None
        return Session(user=user, provider_token=token, time_zone=self.time_zone)

    def sign_out(self) -> None:
        self.creds = None
        for path in (self.token_path, self.session_path):
            try:
                if path.exists():
                    path.unlink()
            except OSError as exc:
                self._log(f"Failed to remove {path.name}: {exc}")
        self._log("Signed out")
        self._emit(SIGNED_OUT, None)

    # ----- helpers -----
    def _log(self, message: str) -> None:
        self.logger.info(message)

    def _fetch_profile(self, creds: Credentials) -> dict:
        service = build("oauth2", "v2", credentials=creds, cache_discovery=False)
        return service.userinfo().get().execute()

    def _load_user(self) -> Optional[AuthUser]:
        if not self.session_path.exists():
            return None
        try:
            data = json.loads(self.session_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            self._log(f"Failed to load session.json: {exc}")
            return None
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return AuthUser(
            id=str(data["id"]),
            email=data.get("email"),
            provider=data.get("provider") or CALENDAR.provider,
        )

    def _load_token(self) -> str:
        if self.creds and self.creds.token:
            return self.creds.token
        if not self.token_path.exists():
            return ""
        try:
            self.creds = Credentials.from_authorized_user_file(str(self.token_path), SCOPES)
        except (ValueError, json.JSONDecodeError) as exc:
            self._log(f"Failed to load token.json: {exc}")
            self.creds = None
            return ""
        return self.creds.token or ""

    @staticmethod
    def _has_required_scopes(creds: Credentials) -> bool:
        current = set(creds.scopes or [])
        return "https://www.googleapis.com/auth/calendar" in current

    def _log_active_scopes(self, scopes: Iterable[str] | None) -> None:
        scopes_list = sorted(set(scopes or []))
        self._log(f"Active scopes: {', '.join(scopes_list) if scopes_list else '-'}")


__all__ = ["AuthSubscription", "GoogleAuth", "SCOPES", "SIGNED_IN", "SIGNED_OUT"]
