"""Database engine and session factory."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from placement.config import Config


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure the parent directory exists."""
    if not url.startswith("sqlite") or ":memory:" in url:
        return url

    prefix_end = url.index("///") + 3
    prefix, path = url[:prefix_end], url[prefix_end:]
    abs_path = os.path.abspath(os.path.expanduser(path))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)
    return f"{prefix}{abs_path}"


def create_db_engine(config: Config) -> AsyncEngine:
    url = _expand_sqlite_path(config.database.url)

    if ":memory:" in url:
        engine_kwargs: dict[str, Any] = {
            "echo": config.database.echo,
            # An in-memory database lives only as long as its one connection
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    elif url.startswith("sqlite"):
        engine_kwargs = {
            "echo": config.database.echo,
            "connect_args": {"timeout": 30},
        }
    else:
        engine_kwargs = {
            "echo": config.database.echo,
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
        }

    engine = create_async_engine(url, **engine_kwargs)
    if url.startswith("sqlite"):
        _enable_sqlite_savepoints(engine)
    return engine


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT works under the sqlite driver."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

