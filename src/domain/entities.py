"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Order``: enforces the one-way lifecycle
  (UNASSIGNED -> TAKEN).  There is no way back.
- ``parse_status`` is the single place a stored status literal becomes an
  ``OrderStatus``; anything else is a data-integrity fault.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import ORDER_TRANSITIONS, OrderStatus
from .errors import UnknownOrderState


class InvalidStateTransition(Exception):
    """Raised when an order status change violates the state machine."""


def parse_status(raw: object) -> OrderStatus:
    """Map a stored status value onto the enumeration, else raise."""
    if isinstance(raw, OrderStatus):
        return raw
    try:
        return OrderStatus(raw)
    except ValueError:
        raise UnknownOrderState(raw) from None


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    def as_query(self) -> str:
        """``lat,lng`` as accepted by routing APIs."""
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True)
class Distance:
    meters: int
    text: str = ""


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Order:
    id: Optional[int] = None
    distance: float = 0.0
    status: OrderStatus = OrderStatus.UNASSIGNED

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in ORDER_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: OrderStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        if not self.can_transition_to(new_status):
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
