"""Order aggregate: a buyer's purchase from one farmer.

Prices are captured per item when the order is placed and never re-read
from the live product, so later price edits cannot change what the buyer
pays. The total is the exact sum of the item subtotals.

State Machine (4 states):
    PENDING → ACCEPTED → COMPLETED
    PENDING | ACCEPTED → CANCELLED
    COMPLETED, CANCELLED → (terminal)

Cancellation is the only transition with an inventory effect; the command
layer restores stock for every item through one routine
(``marketplace.order.cancellation.cancel_and_restore``).
"""

import json
from collections import Counter
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, HasMany, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.exceptions import InvalidStatusTransition
from marketplace.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from marketplace.shared.money import to_money

MAX_ITEMS = 50
MAX_QUANTITY = 999_999


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.ACCEPTED, OrderStatus.CANCELLED},
    OrderStatus.ACCEPTED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.ACCEPTED}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """One product line, priced at the moment the order was placed."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1, max_value=MAX_QUANTITY)
    price_at_time = Decimal(required=True, precision=8, scale=2)
    subtotal = Decimal(required=True, precision=14, scale=2)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate(limit=None)
class Order:
    buyer_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = Decimal(required=True, precision=14, scale=2)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    delivery_address = String(required=True, min_length=10, max_length=500)
    notes = Text()

    # Review markers, one per direction; bumped in the same Unit of Work as
    # the review insert so racing submissions conflict on the order version.
    buyer_reviewed = Boolean(default=False)
    farmer_reviewed = Boolean(default=False)

    cancelled_by = Identifier()
    cancellation_reason = String(max_length=500)
    placed_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def must_have_between_one_and_fifty_items(self):
        if not 1 <= len(self.items) <= MAX_ITEMS:
            raise ValidationError({"items": [f"Order must have between 1 and {MAX_ITEMS} items"]})

    @invariant.post
    def subtotals_match_captured_prices(self):
        for item in self.items:
            if item.subtotal != to_money(item.quantity * item.price_at_time):
                raise ValidationError({"items": [f"Subtotal for product {item.product_id} does not match its price"]})

    @invariant.post
    def total_is_sum_of_subtotals(self):
        expected = to_money(sum((item.subtotal for item in self.items), 0))
        if self.total_amount is not None and self.total_amount != expected:
            raise ValidationError({"total_amount": ["Total amount must equal the sum of item subtotals"]})

    @invariant.post
    def notes_length(self):
        if self.notes and len(self.notes) > 1000:
            raise ValidationError({"notes": ["Notes cannot exceed 1000 characters"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, buyer_id, farmer_id, lines, delivery_address, notes=None):
        """Create a PENDING order from priced lines.

        Each line is a dict with ``product_id``, ``product_name``,
        ``quantity`` and ``unit_price`` (the product's price right now).
        """
        now = datetime.now(UTC)

        items = []
        for line in lines:
            price = to_money(line["unit_price"])
            items.append(
                OrderItem(
                    product_id=line["product_id"],
                    product_name=line["product_name"],
                    quantity=line["quantity"],
                    price_at_time=price,
                    subtotal=to_money(line["quantity"] * price),
                )
            )
        total = to_money(sum((item.subtotal for item in items), 0))

        order = cls(
            buyer_id=buyer_id,
            farmer_id=farmer_id,
            items=items,
            total_amount=total,
            status=OrderStatus.PENDING.value,
            delivery_address=delivery_address.strip() if delivery_address else delivery_address,
            notes=notes,
            buyer_reviewed=False,
            farmer_reviewed=False,
            placed_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_id=str(buyer_id),
                farmer_id=str(farmer_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "quantity": item.quantity,
                            "price_at_time": str(item.price_at_time),
                            "subtotal": str(item.subtotal),
                        }
                        for item in order.items
                    ]
                ),
                item_count=len(order.items),
                total_amount=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    @property
    def is_cancellable(self) -> bool:
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStatusTransition(
                {"status": [f"Cannot transition order from {current.value} to {target_status.value}"]}
            )

    def transition_to(self, target_status, changed_by, reason=None):
        """Move the order along one legal edge. State is untouched on failure."""
        target = OrderStatus(target_status)
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        if target == OrderStatus.CANCELLED:
            self.cancelled_by = changed_by
            self.cancellation_reason = reason
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    previous_status=previous,
                    cancelled_by=str(changed_by),
                    reason=reason,
                    cancelled_at=now,
                )
            )
        else:
            self.raise_(
                OrderStatusChanged(
                    order_id=str(self.id),
                    previous_status=previous,
                    new_status=target.value,
                    changed_by=str(changed_by),
                    changed_at=now,
                )
            )

    def accept(self, accepted_by):
        self.transition_to(OrderStatus.ACCEPTED, accepted_by)

    def complete(self, completed_by):
        self.transition_to(OrderStatus.COMPLETED, completed_by)

    # -------------------------------------------------------------------
    # Inventory & reviews
    # -------------------------------------------------------------------
    def stock_movements(self) -> dict[str, int]:
        """Quantity per product, with repeated lines of one product summed."""
        totals = Counter()
        for item in self.items:
            totals[str(item.product_id)] += item.quantity
        return dict(totals)

    def has_been_reviewed_by(self, reviewer_role) -> bool:
        return bool(self.buyer_reviewed if reviewer_role == "BUYER" else self.farmer_reviewed)

    def mark_reviewed(self, reviewer_role):
        if reviewer_role == "BUYER":
            self.buyer_reviewed = True
        else:
            self.farmer_reviewed = True
        self.updated_at = datetime.now(UTC)
