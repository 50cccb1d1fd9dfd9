"""Read paths for orders, scoped by who is asking."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from marketplace.exceptions import NotPermitted
from marketplace.farmer.registration import farmer_for_user, load_farmer
from marketplace.order.cancellation import load_order
from marketplace.order.order import Order, OrderStatus
from marketplace.shared.paging import check_page
from marketplace.shared.principal import Principal


@dataclass(frozen=True)
class OrderFilter:
    status: str | None = None
    farmer_id: str | None = None
    buyer_id: str | None = None


@dataclass(frozen=True)
class OrderPage:
    items: list
    total: int
    page: int
    limit: int


def is_party_to(order, principal: Principal) -> bool:
    """Buyer, the farmer's owning user, or an admin."""
    if principal.is_admin or str(order.buyer_id) == str(principal.user_id):
        return True
    farmer = farmer_for_user(principal.user_id)
    return farmer is not None and str(farmer.id) == str(order.farmer_id)


def get_order(order_id, principal: Principal) -> Order:
    order = load_order(order_id)
    if not is_party_to(order, principal):
        raise NotPermitted({"order": ["You are not a party to this order"]})
    return order


def list_orders(order_filter: OrderFilter, principal: Principal, page: int = 1, limit: int = 20) -> OrderPage:
    """Orders visible to ``principal`` matching ``order_filter``, newest first.

    Buyers only ever see their own orders and farmers only orders placed with
    their farm, whatever the filter says. Admins see everything.
    """
    offset = check_page(page, limit)

    criteria = {}
    if order_filter.status:
        criteria["status"] = OrderStatus(order_filter.status).value
    if order_filter.buyer_id:
        criteria["buyer_id"] = str(order_filter.buyer_id)
    if order_filter.farmer_id:
        load_farmer(order_filter.farmer_id)
        criteria["farmer_id"] = str(order_filter.farmer_id)

    if principal.is_buyer:
        if criteria.get("buyer_id", str(principal.user_id)) != str(principal.user_id):
            return OrderPage(items=[], total=0, page=page, limit=limit)
        criteria["buyer_id"] = str(principal.user_id)
    elif principal.is_farmer:
        farmer = farmer_for_user(principal.user_id)
        if farmer is None or criteria.get("farmer_id", str(farmer.id)) != str(farmer.id):
            return OrderPage(items=[], total=0, page=page, limit=limit)
        criteria["farmer_id"] = str(farmer.id)

    result = (
        current_domain.repository_for(Order)
        ._dao.query.filter(**criteria)
        .order_by("-placed_at")
        .offset(offset)
        .limit(limit)
        .all()
    )
    return OrderPage(items=result.items, total=result.total, page=page, limit=limit)
