import pytest
from protean import current_domain

from marketplace.order.fulfillment import UpdateOrderStatus


@pytest.fixture()
def completed_order(world, builders):
    """An order the world buyer placed and the farmer fulfilled."""
    order_id = builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 1)])
    for status in ("ACCEPTED", "COMPLETED"):
        current_domain.process(
            UpdateOrderStatus(order_id=order_id, status=status, actor_id=world.farmer_user_id, actor_role="FARMER"),
            asynchronous=False,
        )
    return order_id
