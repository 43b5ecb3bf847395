"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

``OrderRepository`` receives an ``AsyncSession`` (unit-of-work) and exposes
the order queries.  ``OrderStore`` is the process-wide handle the lifecycle
manager is built with: it owns the session factory, opens transactions, and
turns driver errors into ``OrderServiceError`` subclasses.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import Row, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import OrderModel
from src.domain.enums import OrderStatus
from src.domain.errors import InternalFailure, StoreWriteFailed

logger = logging.getLogger(__name__)


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(
        self, distance: float, status: OrderStatus = OrderStatus.UNASSIGNED
    ) -> OrderModel:
        order = OrderModel(distance=float(distance), status=status.value)
        self.session.add(order)
        await self.session.flush()
        return order

    async def list_window(self, offset: int, limit: int) -> list[Row]:
        result = await self.session.execute(
            select(OrderModel.id, OrderModel.distance, OrderModel.status)
            .order_by(OrderModel.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.all())

    async def get_status_for_update(self, order_id: int) -> Optional[str]:
        """SELECT ... FOR UPDATE so concurrent claimers queue on the row."""
        result = await self.session.execute(
            select(OrderModel.status)
            .where(OrderModel.id == order_id)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def mark_taken(self, order_id: int) -> bool:
        """Compare-and-set UNASSIGNED -> TAKEN.  False if nothing changed."""
        result = await self.session.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status == OrderStatus.UNASSIGNED.value,
            )
            .values(status=OrderStatus.TAKEN.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class OrderStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[OrderRepository]:
        """Yield a repository inside one transaction.

        Commits when the block exits normally, rolls back when it raises.
        Driver errors and connection failures (``OSError``) surface as
        ``InternalFailure``; domain errors raised by the caller propagate
        unchanged after the rollback.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield OrderRepository(session)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Order store transaction failed")
            raise InternalFailure(f"store transaction failed: {exc}") from exc

    async def insert(self, distance: float) -> OrderModel:
        try:
            async with self.transaction() as repo:
                return await repo.insert(distance)
        except InternalFailure as exc:
            raise StoreWriteFailed(str(exc)) from exc

    async def list_window(self, offset: int, limit: int) -> list[Row]:
        async with self.transaction() as repo:
            return await repo.list_window(offset, limit)
