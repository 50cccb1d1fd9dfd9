"""PlaceOrder: a buyer orders products from one farmer.

The order insert and every stock decrement share the handler's Unit of Work.
If any item fails validation or any decrement would oversell, nothing is
written. A concurrent order that drained the same product first surfaces
here as a version conflict; the handler is re-run against the new stock and
then fails with ``InsufficientStock`` if the order no longer fits.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import InsufficientStock, InvariantViolation, NotPermitted
from marketplace.farmer.registration import load_farmer
from marketplace.order.order import MAX_ITEMS, MAX_QUANTITY, Order
from marketplace.product import ledger
from marketplace.user.registration import load_user


@marketplace.command(part_of="Order")
class PlaceOrder:
    buyer_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id": ..., "quantity": ...}]
    delivery_address = String(required=True, max_length=500)
    notes = Text()


def _parse_items(raw):
    try:
        items = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError:
        raise ValidationError({"items": ["Items must be a JSON list"]}) from None
    if not isinstance(items, list) or not 1 <= len(items) <= MAX_ITEMS:
        raise ValidationError({"items": [f"Order must have between 1 and {MAX_ITEMS} items"]})

    parsed = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError({"items": ["Every item must be an object with product_id and quantity"]})
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not product_id:
            raise ValidationError({"items": ["Every item needs a product_id"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or not 1 <= quantity <= MAX_QUANTITY:
            raise ValidationError({"items": [f"Quantity for product {product_id} must be between 1 and {MAX_QUANTITY:,}"]})
        parsed.append({"product_id": str(product_id), "quantity": quantity})
    return parsed


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        buyer = load_user(command.buyer_id)
        if not buyer.is_buyer:
            raise NotPermitted({"buyer_id": ["Only buyers can place orders"]})

        farmer = load_farmer(command.farmer_id)
        if str(farmer.user_id) == str(buyer.id):
            raise InvariantViolation({"buyer_id": ["Buyer and farmer must be different users"]})

        items = _parse_items(command.items)

        # Repeated lines of one product are checked against their combined quantity
        requested = {}
        for item in items:
            requested[item["product_id"]] = requested.get(item["product_id"], 0) + item["quantity"]

        lines = []
        for item in items:
            product_id = item["product_id"]
            product = ledger.load_product(product_id)

            if str(product.farmer_id) != str(farmer.id):
                raise ValidationError({"items": [f"Product {product_id} does not belong to farmer {farmer.id}"]})
            if not product.is_orderable:
                raise ValidationError({"items": [f"Product {product.name} ({product_id}) is not available for ordering"]})
            if not ledger.can_fulfill(product_id, requested[product_id]):
                raise InsufficientStock(
                    {
                        "items": [
                            f"Insufficient stock for {product.name} ({product_id}): "
                            f"requested {requested[product_id]}, available {product.stock}"
                        ]
                    }
                )

            lines.append(
                {
                    "product_id": product_id,
                    "product_name": product.name,
                    "quantity": item["quantity"],
                    "unit_price": product.price,
                }
            )

        order = Order.place(
            buyer_id=buyer.id,
            farmer_id=farmer.id,
            lines=lines,
            delivery_address=command.delivery_address,
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)

        for product_id, quantity in order.stock_movements().items():
            ledger.adjust_stock(product_id, -quantity, reason="Order placed", reference_id=order.id)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            buyer_id=str(buyer.id),
            farmer_id=str(farmer.id),
            total_amount=str(order.total_amount),
        )
        return str(order.id)
