"""Domain enumerations and state-transition rules."""

import enum


class OrderStatus(str, enum.Enum):
    UNASSIGNED = "UNASSIGNED"
    TAKEN = "TAKEN"


# State machine: maps current status -> set of valid next statuses
ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.UNASSIGNED: {OrderStatus.TAKEN},
    OrderStatus.TAKEN: set(),
}


class ErrorCode(str, enum.Enum):
    """Machine-readable failure codes returned in ``{"error": ...}`` bodies."""

    # Request validation
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    MALFORMED_ORIGIN = "MALFORMED_ORIGIN"
    MALFORMED_DESTINATION = "MALFORMED_DESTINATION"
    INVALID_PARAMETERS = "INVALID_PARAMETERS"
    INVALID_ORDER_ID = "INVALID_ORDER_ID"
    INVALID_PATH = "INVALID_PATH"
    DISALLOWED_METHOD = "DISALLOWED_METHOD"

    # Distance lookup
    DISTANCE_LOOKUP_FAILED = "DISTANCE_LOOKUP_FAILED"
    DISTANCE_LOOKUP_EMPTY = "DISTANCE_LOOKUP_EMPTY"
    DISTANCE_LOOKUP_MALFORMED = "DISTANCE_LOOKUP_MALFORMED"

    # Store / lifecycle
    STORE_WRITE_FAILED = "STORE_WRITE_FAILED"
    UNKNOWN_STATE = "UNKNOWN_STATE"
    NO_SUCH_ORDER = "NO_SUCH_ORDER"
    ALREADY_TAKEN = "ORDER_ALREADY_BEEN_TAKEN"
    INTERNAL_FAILURE = "INTERNAL_FAILURE"
