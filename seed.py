"""
Seed script -- populates the database with sample orders for reviewers.

Run after migrations:
    python seed.py

Creates, through the lifecycle manager (great-circle distances, no API key
needed):
  - 14 orders whose origins step away from downtown Oakland along a gradient
  - the first 2 of them already TAKEN
"""

import asyncio

from sqlalchemy import func, select

from src.config import settings
from src.domain.distance import HaversineDistanceLookup
from src.domain.entities import Location
from src.domain.lifecycle import OrderLifecycleManager
from src.infrastructure.database import create_engine, create_session_factory
from src.infrastructure.models import OrderModel
from src.infrastructure.repositories import OrderStore

ORIGIN_LAT, ORIGIN_LNG = 37.8093475, -122.2740787
DESTINATION = Location(37.8061044, -122.2943356)

ORDER_COUNT = 14
TAKEN_COUNT = 2


async def seed(manager: OrderLifecycleManager) -> None:
    created = []
    for idx in range(ORDER_COUNT):
        origin = Location(ORIGIN_LAT + idx * 0.02, ORIGIN_LNG - idx * 0.02)
        created.append(await manager.create(origin, DESTINATION))
    print(f"  Created {len(created)} orders")

    for order in created[:TAKEN_COUNT]:
        await manager.claim(order.id)
    print(f"  Took {TAKEN_COUNT} orders")


async def main():
    print("Seeding database...")
    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    try:
        async with session_factory() as session:
            # Check if already seeded
            count = await session.scalar(select(func.count()).select_from(OrderModel))
        if count:
            print("Database already seeded. Skipping.")
            return

        manager = OrderLifecycleManager(
            OrderStore(session_factory), HaversineDistanceLookup()
        )
        await seed(manager)
        print("\nSeed complete!")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
