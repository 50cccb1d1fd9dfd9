import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from marketplace.api import (
    farmer_router,
    message_router,
    order_router,
    product_router,
    register_marketplace_exception_handlers,
    review_router,
    user_router,
)


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (user_router, farmer_router, product_router, order_router, review_router, message_router):
        app.include_router(router)
    register_marketplace_exception_handlers(app)
    return TestClient(app)


def as_user(user_id, role):
    return {"X-Actor-Id": user_id, "X-Actor-Role": role}


@pytest.fixture()
def headers(world):
    """Request headers for each of the world's principals."""
    return {
        "buyer": as_user(world.buyer_id, "BUYER"),
        "farmer": as_user(world.farmer_user_id, "FARMER"),
        "admin": as_user(world.admin_id, "ADMIN"),
    }
