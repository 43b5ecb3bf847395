"""
Async SQLAlchemy engine and session factory.

Production runs on PostgreSQL through ``asyncpg``; local runs and tests use
SQLite through ``aiosqlite``.  Nothing here is module-global: the app
lifespan (or a test fixture) builds the engine and hands the session factory
to the ``OrderStore``.

SQLite note
-----------
pysqlite's implicit transaction handling only emits ``BEGIN`` before DML, so
a read-then-update would run its read outside the transaction.  For SQLite
engines we switch the driver to autocommit and emit ``BEGIN IMMEDIATE``
ourselves, which takes the database write lock up front and serialises
concurrent claims.
"""

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


def create_engine(url: str, **kwargs) -> AsyncEngine:
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_async_engine(url, echo=False, **kwargs)
        _use_immediate_transactions(engine)
        return engine

    return create_async_engine(
        url,
        echo=False,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
