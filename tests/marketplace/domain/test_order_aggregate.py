"""Tests for the Order aggregate: price capture, totals and the state machine."""

from decimal import Decimal

import pytest
from marketplace.exceptions import InvalidStatusTransition
from marketplace.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from marketplace.order.order import Order, OrderStatus
from protean.exceptions import ValidationError


def _line(product_id="prod-1", quantity=1, unit_price="2.00", name="Tomatoes"):
    return {"product_id": product_id, "product_name": name, "quantity": quantity, "unit_price": Decimal(unit_price)}


def _make_order(lines=None, **overrides):
    defaults = {
        "buyer_id": "buyer-001",
        "farmer_id": "farmer-001",
        "lines": lines or [_line()],
        "delivery_address": "Ward 4, Banepa, Kavre",
    }
    defaults.update(overrides)
    order = Order.place(**defaults)
    return order


class TestPlace:
    def test_total_is_sum_of_subtotals(self):
        order = _make_order([_line("p1", 3, "2.00"), _line("p2", 1, "5.00", name="Honey")])
        assert order.total_amount == Decimal("11.00")
        assert [item.subtotal for item in order.items] == [Decimal("6.00"), Decimal("5.00")]

    def test_prices_are_captured_per_item(self):
        order = _make_order([_line("p1", 2, "19.99")])
        assert order.items[0].price_at_time == Decimal("19.99")
        assert order.total_amount == Decimal("39.98")

    def test_starts_pending_and_unreviewed(self):
        order = _make_order()
        assert order.status == OrderStatus.PENDING.value
        assert order.buyer_reviewed is False
        assert order.farmer_reviewed is False

    def test_raises_order_placed(self):
        order = _make_order()
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.item_count == 1
        assert event.total_amount == Decimal("2.00")

    def test_needs_at_least_one_item(self):
        with pytest.raises(ValidationError):
            Order.place(
                buyer_id="buyer-001",
                farmer_id="farmer-001",
                lines=[],
                delivery_address="Ward 4, Banepa, Kavre",
            )

    def test_rejects_more_than_fifty_items(self):
        lines = [_line(f"p{i}") for i in range(51)]
        with pytest.raises(ValidationError):
            _make_order(lines)

    def test_short_delivery_address_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_order(delivery_address="Banepa")

    def test_long_notes_are_rejected(self):
        with pytest.raises(ValidationError):
            _make_order(notes="x" * 1001)


class TestStateMachine:
    @pytest.mark.parametrize(
        "path",
        [
            [OrderStatus.ACCEPTED],
            [OrderStatus.ACCEPTED, OrderStatus.COMPLETED],
            [OrderStatus.CANCELLED],
            [OrderStatus.ACCEPTED, OrderStatus.CANCELLED],
        ],
    )
    def test_legal_paths(self, path):
        order = _make_order()
        for status in path:
            order.transition_to(status, changed_by="farmer-user")
        assert order.status == path[-1].value

    @pytest.mark.parametrize(
        "path, illegal",
        [
            ([], OrderStatus.COMPLETED),
            ([], OrderStatus.PENDING),
            ([OrderStatus.ACCEPTED], OrderStatus.ACCEPTED),
            ([OrderStatus.ACCEPTED], OrderStatus.PENDING),
            ([OrderStatus.ACCEPTED, OrderStatus.COMPLETED], OrderStatus.CANCELLED),
            ([OrderStatus.CANCELLED], OrderStatus.ACCEPTED),
            ([OrderStatus.CANCELLED], OrderStatus.CANCELLED),
        ],
    )
    def test_illegal_edges_fail_and_leave_state(self, path, illegal):
        order = _make_order()
        for status in path:
            order.transition_to(status, changed_by="farmer-user")
        before = order.status

        with pytest.raises(InvalidStatusTransition):
            order.transition_to(illegal, changed_by="farmer-user")
        assert order.status == before

    def test_cancellation_records_who_and_why(self):
        order = _make_order()
        order.transition_to(OrderStatus.CANCELLED, changed_by="buyer-001", reason="Changed my mind")
        assert order.cancelled_by == "buyer-001"
        assert order.cancellation_reason == "Changed my mind"
        assert isinstance(order._events[-1], OrderCancelled)

    def test_accept_raises_status_changed(self):
        order = _make_order()
        order.accept(accepted_by="farmer-user")
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "PENDING"
        assert event.new_status == "ACCEPTED"

    def test_only_pending_and_accepted_are_cancellable(self):
        order = _make_order()
        assert order.is_cancellable
        order.accept(accepted_by="farmer-user")
        assert order.is_cancellable
        order.complete(completed_by="farmer-user")
        assert not order.is_cancellable


class TestStockMovements:
    def test_repeated_lines_are_summed(self):
        order = _make_order([_line("p1", 2), _line("p2", 1), _line("p1", 3)])
        assert order.stock_movements() == {"p1": 5, "p2": 1}


class TestReviewMarkers:
    def test_markers_are_per_direction(self):
        order = _make_order()
        order.mark_reviewed("BUYER")
        assert order.has_been_reviewed_by("BUYER")
        assert not order.has_been_reviewed_by("FARMER")
