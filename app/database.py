# app/database.py
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()


def _with_sslmode(url: str) -> str:
    if "sslmode=" in url:
        return url
    return url + ("&" if "?" in url else "?") + "sslmode=require"


def build_engine(url: str) -> Engine:
    """
    Engine for the store database.

    Postgres (Supabase pooler, session mode):
      - sslmode=require is appended when missing
      - one pooled connection, no overflow, pre-ping
        (the pooler rejects extra clients with "MaxClientsInSessionMode")

    Anything else (SQLite for local runs and tests) is opened for use
    across FastAPI's worker threads.
    """
    options: dict[str, Any] = {"echo": False}

    if url.startswith("postgres"):
        url = _with_sslmode(url)
        options.update(pool_pre_ping=True, pool_size=1, max_overflow=0)
    else:
        options["connect_args"] = {"check_same_thread": False}

    return create_engine(url, **options)


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables() -> None:
    """Create products, profiles, cart and orders if they do not exist. Runs at startup."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Request-scoped SQLModel session (FastAPI dependency)."""
    with Session(engine) as session:
        yield session
