"""Order service error hierarchy.

Every failure the lifecycle manager can report inherits from
``OrderServiceError`` and carries an ``ErrorCode`` plus the HTTP status the
API boundary should answer with, so callers classify errors by type and
never by message text.
"""

from __future__ import annotations

from .enums import ErrorCode


class OrderServiceError(Exception):
    """Base exception for all order-service failures."""

    code: ErrorCode = ErrorCode.INTERNAL_FAILURE
    http_status: int = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code.value)


# ── Distance lookup ───────────────────────────────────────────────────


class DistanceLookupError(OrderServiceError):
    """The routing collaborator did not yield a usable distance."""

    http_status = 502


class DistanceLookupFailed(DistanceLookupError):
    """Transport failure, timeout, or request rejected by the provider."""

    code = ErrorCode.DISTANCE_LOOKUP_FAILED


class DistanceLookupEmpty(DistanceLookupError):
    """Response decoded fine but has no rows / elements / distance."""

    code = ErrorCode.DISTANCE_LOOKUP_EMPTY


class DistanceLookupMalformed(DistanceLookupError):
    """Response body could not be decoded into the expected shape."""

    code = ErrorCode.DISTANCE_LOOKUP_MALFORMED


# ── Store / lifecycle ─────────────────────────────────────────────────


class InvalidParameters(OrderServiceError):
    code = ErrorCode.INVALID_PARAMETERS
    http_status = 400


class StoreWriteFailed(OrderServiceError):
    code = ErrorCode.STORE_WRITE_FAILED


class UnknownOrderState(OrderServiceError):
    """A stored status literal is outside the ``OrderStatus`` enumeration."""

    code = ErrorCode.UNKNOWN_STATE

    def __init__(self, raw_status: object) -> None:
        self.raw_status = raw_status
        super().__init__(f"Unknown order status {raw_status!r}")


class NoSuchOrder(OrderServiceError):
    code = ErrorCode.NO_SUCH_ORDER
    http_status = 404

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"No order with id {order_id}")


class OrderAlreadyTaken(OrderServiceError):
    code = ErrorCode.ALREADY_TAKEN
    http_status = 409

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"Order {order_id} has already been taken")


class InternalFailure(OrderServiceError):
    """Store connectivity or other transient failure; safe to retry."""

    code = ErrorCode.INTERNAL_FAILURE


class ClaimTimeout(InternalFailure):
    def __init__(self, order_id: int, timeout: float) -> None:
        self.order_id = order_id
        self.timeout = timeout
        super().__init__(f"Claim of order {order_id} exceeded {timeout}s")
