"""Database connection and session management."""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from areaqa.config import get_settings

engine = None
session_factory = None


class Base(DeclarativeBase):
    pass


def _sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA synchronous = OFF")
    cursor.close()


def init_db(database_url: Optional[str] = None):
    global engine, session_factory
    settings = get_settings()
    url = database_url or settings.database_url

    engine = create_engine(url, echo=settings.debug)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _sqlite_pragmas)

    session_factory = sessionmaker(engine, expire_on_commit=False)

    # Register models on Base.metadata before creating tables
    from areaqa.models.database import anomaly  # noqa: F401

    Base.metadata.create_all(engine)
    return engine


def close_db():
    global engine, session_factory
    if engine:
        engine.dispose()
    engine = None
    session_factory = None


def get_session() -> Session:
    if session_factory is None:
        raise RuntimeError("Database not initialized")
    return session_factory()
