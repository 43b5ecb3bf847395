"""
Shared test fixtures.

Uses a throw-away SQLite file database (via aiosqlite) so tests run without
Docker / PostgreSQL.  A file rather than ``:memory:`` so that every session
gets its own connection and concurrent claims really contend for the
database write lock.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from src.domain.distance import DistanceLookup, HaversineDistanceLookup
from src.domain.entities import Distance, Location
from src.domain.lifecycle import OrderLifecycleManager
from src.infrastructure.database import Base, create_engine, create_session_factory
from src.infrastructure.repositories import OrderStore


class StaticDistanceLookup(DistanceLookup):
    """Deterministic stand-in: always the same distance, records calls."""

    def __init__(self, meters: int = 2489):
        self.meters = meters
        self.calls: list[tuple[Location, Location]] = []

    async def lookup(self, origin: Location, destination: Location) -> Distance:
        self.calls.append((origin, destination))
        return Distance(meters=self.meters, text=f"{self.meters / 1000:.1f} km")


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create tables in a fresh database file, yield the engine."""
    engine = create_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def store(session_factory) -> OrderStore:
    return OrderStore(session_factory)


@pytest_asyncio.fixture
async def manager(store) -> OrderLifecycleManager:
    """Manager over the SQLite store with great-circle distances."""
    return OrderLifecycleManager(store, HaversineDistanceLookup(), claim_timeout=10.0)


@pytest_asyncio.fixture
async def client(store) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the app, backed by SQLite and a fixed distance."""
    from src.api.app import create_app
    from src.api.dependencies import get_order_manager
    from src.api.middleware import limiter

    app = create_app()
    manager = OrderLifecycleManager(store, StaticDistanceLookup(), claim_timeout=10.0)
    app.dependency_overrides[get_order_manager] = lambda: manager

    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
