"""Pydantic request/response schemas for the marketplace API.

These are separate from Protean commands (anti-corruption pattern): the
schemas guarantee input shapes, the domain re-checks business rules.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=254)
    role: str
    language: str = "en"


class RegisterFarmerRequest(BaseModel):
    user_id: str | None = None  # defaults to the caller; only admins may name someone else
    farm_name: str = Field(min_length=2, max_length=200)
    district: str = Field(max_length=100)
    municipality: str = Field(max_length=100)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Organic tomatoes",
                    "description": "Vine-ripened tomatoes from Kavre, picked this morning.",
                    "category": "Vegetables",
                    "unit": "kg",
                    "price": "120.00",
                    "stock": 40,
                }
            ]
        }
    }

    name: str = Field(min_length=2, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    category: str = "Other"
    unit: str = "kg"
    price: Decimal = Field(gt=0, max_digits=8, decimal_places=2)
    stock: int = Field(default=0, ge=0)


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=2000)
    category: str | None = None
    unit: str | None = None
    price: Decimal | None = Field(default=None, gt=0, max_digits=8, decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    status: str | None = None


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, le=999_999)


class PlaceOrderRequest(BaseModel):
    farmer_id: str
    items: list[OrderItemRequest] = Field(min_length=1, max_length=50)
    delivery_address: str = Field(min_length=10, max_length=500)
    notes: str | None = Field(default=None, max_length=1000)


class UpdateOrderStatusRequest(BaseModel):
    status: str
    reason: str | None = Field(default=None, max_length=500)


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class SubmitReviewRequest(BaseModel):
    order_id: str
    reviewee_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=10, max_length=1000)


class EditReviewRequest(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=10, max_length=1000)


class ModerateRequest(BaseModel):
    action: str  # "approve"/"reject" or "APPROVED"/"REJECTED", for reviews and messages alike


class SendMessageRequest(BaseModel):
    receiver_id: str
    content: str = Field(min_length=1, max_length=2000)
    language: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class IdResponse(BaseModel):
    id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class EligibilityResponse(BaseModel):
    can_review: bool


class CountResponse(BaseModel):
    count: int


class FarmerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    farm_name: str
    district: str
    municipality: str
    is_verified: bool
    rating: float
    review_count: int


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    farmer_id: str
    name: str
    description: str
    category: str
    unit: str
    price: Decimal
    stock: int
    status: str
    is_available: bool


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    product_name: str
    quantity: int
    price_at_time: Decimal
    subtotal: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    buyer_id: str
    farmer_id: str
    items: list[OrderItemResponse]
    total_amount: Decimal
    status: str
    delivery_address: str
    notes: str | None = None
    placed_at: datetime | None = None


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    limit: int


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_id: str
    reviewer_id: str
    reviewee_id: str
    reviewer_role: str
    rating: int
    comment: str
    is_approved: bool
    moderation_flag: str | None = None
    created_at: datetime | None = None


class ReviewListResponse(BaseModel):
    items: list[ReviewResponse]
    total: int
    page: int
    limit: int


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    receiver_id: str
    content: str
    language: str
    is_read: bool
    moderation_flag: str | None = None
    sent_at: datetime | None = None


class ConversationSummaryResponse(BaseModel):
    partner_id: str
    last_message: MessageResponse
    unread_count: int
