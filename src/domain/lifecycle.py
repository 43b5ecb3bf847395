"""
Order Lifecycle Manager
=======================

Implements the three operations the API exposes:

* ``create``      -- distance lookup, then a single insert.
* ``list_orders`` -- windowed read, rows mapped onto ``OrderStatus``.
* ``claim``       -- UNASSIGNED -> TAKEN inside one store transaction.

Concurrency safety
------------------
The manager holds no locks and no cached rows.  ``claim`` runs
read-check-write inside ``store.transaction()``: the read takes a row lock
(``SELECT ... FOR UPDATE`` on PostgreSQL, ``BEGIN IMMEDIATE`` on SQLite) and
the write is a compare-and-set on ``status = 'UNASSIGNED'``, so two callers
can never both observe UNASSIGNED and both write TAKEN, even across
processes sharing the database.  The losing caller fails with
``OrderAlreadyTaken``; there is no retry loop.

Pagination
----------
``page`` is a zero-based window index: the window starts at row
``page * limit`` in ascending id order.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Optional, Protocol

from .distance import DistanceLookup
from .entities import Location, Order, parse_status
from .enums import OrderStatus
from .errors import (
    ClaimTimeout,
    InvalidParameters,
    NoSuchOrder,
    OrderAlreadyTaken,
)

logger = logging.getLogger(__name__)

# Signed 64-bit INTEGER range of the store; ids and offsets beyond it cannot
# match a row.
MAX_ROW_INDEX = 2**63 - 1


class OrderTransaction(Protocol):
    async def get_status_for_update(self, order_id: int) -> Optional[str]: ...

    async def mark_taken(self, order_id: int) -> bool: ...


class OrderStorePort(Protocol):
    """What the manager needs from the store (see ``OrderStore``)."""

    def transaction(self) -> AbstractAsyncContextManager[OrderTransaction]: ...

    async def insert(self, distance: float) -> Any: ...

    async def list_window(self, offset: int, limit: int) -> list[Any]: ...


class OrderLifecycleManager:
    def __init__(
        self,
        store: OrderStorePort,
        distance_lookup: DistanceLookup,
        *,
        claim_timeout: float = 2.0,
        default_page_size: int = 50,
    ):
        self.store = store
        self.distance_lookup = distance_lookup
        self.claim_timeout = claim_timeout
        self.default_page_size = default_page_size

    # ── Create ────────────────────────────────────────────────────────

    async def create(self, origin: Location, destination: Location) -> Order:
        """Look up the distance, then persist a new UNASSIGNED order.

        The lookup runs before any write, so a lookup failure leaves the
        store untouched.
        """
        distance = await self.distance_lookup.lookup(origin, destination)
        row = await self.store.insert(distance.meters)

        order = Order(
            id=row.id, distance=row.distance, status=parse_status(row.status)
        )
        logger.info("Order %d created (distance=%dm)", order.id, distance.meters)
        return order

    # ── List ──────────────────────────────────────────────────────────

    async def list_orders(
        self, page: int = 0, limit: Optional[int] = None
    ) -> list[Order]:
        if limit is None:
            limit = self.default_page_size
        if page < 0 or limit < 0:
            raise InvalidParameters(f"page={page} limit={limit}")

        offset = page * limit
        if offset > MAX_ROW_INDEX:
            return []
        rows = await self.store.list_window(
            offset=offset, limit=min(limit, MAX_ROW_INDEX)
        )
        # Fail the whole call on an unrecognised status; never drop rows.
        return [
            Order(id=r.id, distance=r.distance, status=parse_status(r.status))
            for r in rows
        ]

    # ── Claim ─────────────────────────────────────────────────────────

    async def claim(self, order_id: int) -> None:
        """Atomically move *order_id* from UNASSIGNED to TAKEN.

        Raises ``NoSuchOrder``, ``OrderAlreadyTaken``, ``UnknownOrderState``,
        ``ClaimTimeout`` or ``InternalFailure``.  Every failure rolls back.
        """
        try:
            await asyncio.wait_for(self._claim(order_id), timeout=self.claim_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Claim of order %d timed out after %.1fs", order_id, self.claim_timeout
            )
            raise ClaimTimeout(order_id, self.claim_timeout) from None
        except (NoSuchOrder, OrderAlreadyTaken) as exc:
            logger.info("Claim rejected: %s", exc)
            raise
        logger.info("Order %d taken", order_id)

    async def _claim(self, order_id: int) -> None:
        if not 0 < order_id <= MAX_ROW_INDEX:
            raise NoSuchOrder(order_id)
        async with self.store.transaction() as tx:
            raw_status = await tx.get_status_for_update(order_id)
            if raw_status is None:
                raise NoSuchOrder(order_id)

            order = Order(id=order_id, status=parse_status(raw_status))
            if not order.can_transition_to(OrderStatus.TAKEN):
                raise OrderAlreadyTaken(order_id)

            if not await tx.mark_taken(order_id):
                raise OrderAlreadyTaken(order_id)
            order.transition_to(OrderStatus.TAKEN)
