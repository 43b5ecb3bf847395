"""
SQLAlchemy ORM models.

Tables
------
* ``orders`` -- one row per delivery order.

``status`` is a plain string column rather than a database enum so that a
row written by an incompatible schema version can still be read back and
reported as an integrity fault instead of crashing the driver.  The
migration adds a CHECK constraint on PostgreSQL.
"""

from sqlalchemy import Column, DateTime, Float, Index, Integer, String, func

from .database import Base
from src.domain.enums import OrderStatus


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    distance = Column(Float, nullable=False)
    status = Column(
        String(16), default=OrderStatus.UNASSIGNED.value, nullable=False
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_orders_status", "status"),
        {"sqlite_autoincrement": True},  # ids are never reused
    )
