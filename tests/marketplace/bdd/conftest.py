"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from marketplace.exceptions import (
    AlreadyApproved,
    CannotRejectApproved,
    IneligibleReviewer,
    InsufficientStock,
    InvalidStatusTransition,
    NotPermitted,
    OrderNotCancellable,
)
from marketplace.order.cancellation import CancelOrder
from marketplace.order.fulfillment import UpdateOrderStatus
from marketplace.order.order import Order
from marketplace.product.product import Product

_ERRORS = {
    "AlreadyApproved": AlreadyApproved,
    "CannotRejectApproved": CannotRejectApproved,
    "IneligibleReviewer": IneligibleReviewer,
    "InsufficientStock": InsufficientStock,
    "InvalidStatusTransition": InvalidStatusTransition,
    "NotPermitted": NotPermitted,
    "OrderNotCancellable": OrderNotCancellable,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the exception a step captured."""
    return {"exc": None}


def _actor(world, who):
    return {
        "buyer": (world.buyer_id, "BUYER"),
        "farmer": (world.farmer_user_id, "FARMER"),
        "admin": (world.admin_id, "ADMIN"),
    }[who]


def _cancel(order_id, actor_id, role):
    current_domain.process(
        CancelOrder(order_id=order_id, actor_id=actor_id, actor_role=role, reason="Cannot deliver this week"),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a published product with {stock:d} in stock"), target_fixture="product_id")
def published_product(world, builders, stock):
    return builders.list_product(world.farmer_user_id, name="Carrots", price="1.50", stock=stock)


@given(parsers.cfparse("the buyer has ordered {quantity:d} of the product"), target_fixture="order_id")
def buyer_ordered(world, builders, product_id, quantity):
    return builders.place_order(world.buyer_id, world.farmer_id, [(product_id, quantity)])


@given(parsers.cfparse('the {who} has moved the order to "{status}"'))
def order_moved(world, order_id, who, status):
    actor_id, role = _actor(world, who)
    current_domain.process(
        UpdateOrderStatus(order_id=order_id, status=status, actor_id=actor_id, actor_role=role),
        asynchronous=False,
    )


@given(parsers.cfparse("the {who} has cancelled the order"))
def order_cancelled(world, order_id, who):
    actor_id, role = _actor(world, who)
    _cancel(order_id, actor_id, role)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the {who} moves the order to "{status}"'))
def move_order(world, order_id, error, who, status):
    actor_id, role = _actor(world, who)
    try:
        current_domain.process(
            UpdateOrderStatus(order_id=order_id, status=status, actor_id=actor_id, actor_role=role),
            asynchronous=False,
        )
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse("the {who} cancels the order"))
def cancel_order(world, order_id, error, who):
    actor_id, role = _actor(world, who)
    try:
        _cancel(order_id, actor_id, role)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse("the product stock is {stock:d}"))
def product_stock_is(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@then(parsers.cfparse("the action is refused with {name}"))
def action_refused(error, name):
    assert error["exc"] is not None, f"Expected {name} but nothing was raised"
    assert isinstance(error["exc"], _ERRORS[name]), f"Got {type(error['exc']).__name__}"
