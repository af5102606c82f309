"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env or os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "Taskboard"


DATA_DIR = Path(os.environ.get("TASKBOARD_DATA_DIR") or get_default_data_dir(APP_NAME))
SECRETS_DIR = DATA_DIR / "secrets"
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, SECRETS_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "taskboard.db"
DATABASE_URL = os.environ.get("TASKBOARD_DATABASE_URL") or f"sqlite:///{DB_PATH.as_posix()}"
TOKEN_PATH = DATA_DIR / "token.json"
SESSION_PATH = DATA_DIR / "session.json"
CLIENT_SECRET_PATH = SECRETS_DIR / "client_secret.json"
LOG_PATH = LOG_DIR / "taskboard.log"


@dataclass(frozen=True)
class ThemeColors:
    page_bg: str = "#1F2937"
    header_text: str = "#FFFFFF"
    completed_card_bg: str = "#D1D5DB"
    create_button: str = "#3B82F6"
    edit_button: str = "#F97316"
    delete_button: str = "#EF4444"
    done_button: str = "#22C55E"
    link: str = "#2563EB"


@dataclass(frozen=True)
class UISettings:
    app_title: str = APP_NAME
    theme_mode: str = "dark"
    color_scheme_seed: str = "#3B82F6"
    window_min_width: int = 420
    window_min_height: int = 600
    card_width: int = 288
    card_height: int = 288
    description_max_length: int = 100
    description_preview_lines: int = 3
    theme: ThemeColors = ThemeColors()


UI = UISettings()


@dataclass(frozen=True)
class CalendarSettings:
    calendar_id: str = "primary"
    provider: str = "google"
    scopes: tuple[str, ...] = (
        "openid",
        "https://www.googleapis.com/auth/userinfo.email",
        "https://www.googleapis.com/auth/calendar",
    )
    # When True a failed calendar delete keeps the task row in place.
    block_delete_on_calendar_error: bool = False
    default_time_zone: Optional[str] = os.environ.get("TASKBOARD_TIMEZONE") or None


CALENDAR = CalendarSettings()


@dataclass(frozen=True)
class LoggingSettings:
    level: str = os.environ.get("TASKBOARD_LOG_LEVEL", "INFO").upper()
    path: Path = LOG_PATH
    max_bytes: int = 1_000_000
    backup_count: int = 3


LOGGING = LoggingSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "SECRETS_DIR",
    "LOG_DIR",
    "DB_PATH",
    "DATABASE_URL",
    "TOKEN_PATH",
    "SESSION_PATH",
    "CLIENT_SECRET_PATH",
    "LOG_PATH",
    "UI",
    "CALENDAR",
    "LOGGING",
    "get_default_data_dir",
]
