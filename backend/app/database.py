"""Async SQLAlchemy engine, session factory and FastAPI dependency"""
import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite gets real transactions and foreign keys"""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo, pool_pre_ping=True)

    kwargs = {"echo": echo, "connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # One shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_async_engine(database_url, **kwargs)

    # pysqlite's implicit transaction handling breaks SAVEPOINT; take over BEGIN
    @event.listens_for(sqlite_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sqlite_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return sqlite_engine


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """One session per request, from the session factory create_app attached to the app"""
    async with request.app.state.session_maker() as session:
        yield session


async def init_db(engine: AsyncEngine):
    """Create tables that don't exist yet"""
    # Import models so they register on Base.metadata
    from app.models import user, category, category_request, blog  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


async def close_db(engine: AsyncEngine):
    await engine.dispose()
