"""Marketplace HTTP API package."""

from marketplace.api.errors import register_marketplace_exception_handlers
from marketplace.api.routes import (
    farmer_router,
    message_router,
    order_router,
    product_router,
    review_router,
    user_router,
)

__all__ = [
    "farmer_router",
    "message_router",
    "order_router",
    "product_router",
    "register_marketplace_exception_handlers",
    "review_router",
    "user_router",
]
