# taskboard/models/task.py
from typing import Optional
from datetime import datetime

from datetime_utils import utc_now
from sqlmodel import SQLModel, Field


class Task(SQLModel, table=True):
    # Timestamps are written as aware UTC; SQLite may hand them back naive, read them through ensure_utc().
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str = ""
    reminder_time: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)
    completed: bool = False
    event_id: Optional[str] = None
    user_id: str = Field(index=True)
