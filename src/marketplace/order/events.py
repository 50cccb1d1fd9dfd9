"""Domain events for the Order aggregate.

Notification and audit consumers may subscribe to these; nothing in the
marketplace core depends on a subscriber existing.
"""

from protean.fields import DateTime, Decimal, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_id, quantity, price_at_time, subtotal}]
    item_count = Integer(required=True)
    total_amount = Decimal(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along PENDING → ACCEPTED → COMPLETED."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_by = Identifier(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
