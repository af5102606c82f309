# taskboard/storage/db.py
from sqlmodel import SQLModel, create_engine, Session

from core.settings import DATABASE_URL, DB_PATH

# Ensure SQLModel metadata is populated
import models.task  # noqa: F401


_engine = create_engine(DATABASE_URL, echo=False)


def init_db():
    if DATABASE_URL.startswith("sqlite"):
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(_engine)


def get_session() -> Session:
    return Session(_engine)
