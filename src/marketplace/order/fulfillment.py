"""UpdateOrderStatus: the farmer (or an admin) advances an order.

PENDING → ACCEPTED → COMPLETED, or CANCELLED from PENDING/ACCEPTED. A
cancellation routed through here restores inventory exactly like a buyer's
``CancelOrder``.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import NotPermitted
from marketplace.farmer.registration import load_farmer
from marketplace.order.cancellation import cancel_and_restore, load_order
from marketplace.order.order import Order, OrderStatus
from marketplace.user.user import is_admin


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = load_order(command.order_id)

        if not is_admin(command.actor_role):
            farmer = load_farmer(order.farmer_id)
            if str(farmer.user_id) != str(command.actor_id):
                raise NotPermitted({"order": ["Only the farmer or an administrator can update this order"]})

        target = OrderStatus(command.status)
        if target == OrderStatus.CANCELLED:
            cancel_and_restore(order, command.actor_id, reason=command.reason)
            return

        previous = order.status
        order.transition_to(target, command.actor_id)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
        )
