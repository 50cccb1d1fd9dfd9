"""Order cancellation: command, handler, and the shared restoration routine.

Both ways of cancelling (the buyer's ``CancelOrder`` and an
``UpdateOrderStatus`` to CANCELLED) end in ``cancel_and_restore``, so stock
is restored in exactly one place. The order's optimistic version makes the
restoration happen once: of two racing cancellations the second is re-run,
sees a CANCELLED order, and fails.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import NotFound, NotPermitted, OrderNotCancellable
from marketplace.order.order import Order, OrderStatus
from marketplace.product import ledger
from marketplace.user.user import is_admin


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)
    reason = String(max_length=500)


def load_order(order_id) -> Order:
    """Fetch an order or raise ``NotFound``."""
    order = current_domain.repository_for(Order).get_or_none(order_id)
    if order is None:
        raise NotFound("Order", order_id)
    return order


def restore_inventory(order):
    """Give back the stock an order took when it was placed."""
    for product_id, quantity in order.stock_movements().items():
        ledger.adjust_stock(product_id, quantity, reason="Order cancelled", reference_id=order.id)


def cancel_and_restore(order, cancelled_by, reason=None):
    """Move ``order`` to CANCELLED and restore its inventory.

    Raises ``InvalidStatusTransition`` when CANCELLED is not reachable; in
    that case nothing has been restored.
    """
    order.transition_to(OrderStatus.CANCELLED, cancelled_by, reason=reason)
    current_domain.repository_for(Order).add(order)
    restore_inventory(order)

    logger.info(
        "Order cancelled",
        order_id=str(order.id),
        cancelled_by=str(cancelled_by),
        restored_items=len(order.items),
    )


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)

        if not is_admin(command.actor_role) and str(order.buyer_id) != str(command.actor_id):
            raise NotPermitted({"order": ["Only the buyer or an administrator can cancel this order"]})

        if not order.is_cancellable:
            raise OrderNotCancellable({"status": [f"Order cannot be cancelled. Current status: {order.status}"]})

        cancel_and_restore(order, command.actor_id, reason=command.reason)
