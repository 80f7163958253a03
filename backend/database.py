from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config.app_config import get_settings

Base = declarative_base()


def _is_in_memory(url: str) -> bool:
    return url.rstrip("/").endswith(("sqlite:", "sqlite+aiosqlite:", ":memory:"))


def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> Engine:
    """
    Create the SQLAlchemy engine.

    An in-memory SQLite database only lives as long as its connection, so a
    single connection is shared by every session (StaticPool).
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_in_memory(url):
            kwargs["poolclass"] = StaticPool
        new_engine = create_engine(url, echo=False, **kwargs)
        event.listen(new_engine, "connect", set_sqlite_pragma)
        return new_engine
    return create_engine(url, echo=False, pool_pre_ping=True)


def make_async_engine(url: str = "sqlite+aiosqlite://"):
    """Create an AsyncEngine (aiosqlite driver by default) for GenericServiceAsync"""
    from sqlalchemy.ext.asyncio import create_async_engine

    kwargs = {"poolclass": StaticPool} if _is_in_memory(url) else {}
    new_engine = create_async_engine(url, echo=False, **kwargs)
    event.listen(new_engine.sync_engine, "connect", set_sqlite_pragma)
    return new_engine


engine = make_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine)


def get_db():
    """Dependency for FastAPI routes"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
