"""Unit tests for order entity state transitions (State Pattern)."""

import pytest

from src.domain.entities import InvalidStateTransition, Order, parse_status
from src.domain.enums import ORDER_TRANSITIONS, OrderStatus
from src.domain.errors import UnknownOrderState


class TestOrderStateMachine:
    def test_initial_status_is_unassigned(self):
        order = Order()
        assert order.status == OrderStatus.UNASSIGNED

    def test_unassigned_to_taken(self):
        order = Order(status=OrderStatus.UNASSIGNED)
        order.transition_to(OrderStatus.TAKEN)
        assert order.status == OrderStatus.TAKEN

    # ── Invalid transitions ───────────────────────────────────────

    def test_taken_to_taken_fails(self):
        order = Order(status=OrderStatus.TAKEN)
        with pytest.raises(InvalidStateTransition):
            order.transition_to(OrderStatus.TAKEN)

    def test_taken_never_reverts(self):
        order = Order(status=OrderStatus.TAKEN)
        with pytest.raises(InvalidStateTransition):
            order.transition_to(OrderStatus.UNASSIGNED)
        assert order.status == OrderStatus.TAKEN

    def test_unassigned_to_unassigned_fails(self):
        order = Order(status=OrderStatus.UNASSIGNED)
        assert not order.can_transition_to(OrderStatus.UNASSIGNED)

    def test_taken_is_terminal(self):
        assert ORDER_TRANSITIONS[OrderStatus.TAKEN] == set()


class TestParseStatus:
    @pytest.mark.parametrize("raw", ["UNASSIGNED", "TAKEN"])
    def test_canonical_literals(self, raw):
        assert parse_status(raw).value == raw

    def test_enum_passes_through(self):
        assert parse_status(OrderStatus.TAKEN) is OrderStatus.TAKEN

    @pytest.mark.parametrize("raw", ["INITAL", "unassigned", "", None])
    def test_anything_else_is_an_integrity_fault(self, raw):
        with pytest.raises(UnknownOrderState) as excinfo:
            parse_status(raw)
        assert excinfo.value.raw_status == raw
