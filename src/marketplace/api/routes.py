"""FastAPI routes for the marketplace.

Each route translates between Pydantic schemas (external contract) and
Protean commands or read functions (internal domain concepts). The caller's
identity always comes from the ``current_principal`` dependency, never from
the request body.
"""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.dependencies import current_principal, optional_principal
from marketplace.api.schemas import (
    CancelOrderRequest,
    ConversationSummaryResponse,
    CountResponse,
    CreateProductRequest,
    EditReviewRequest,
    EligibilityResponse,
    FarmerResponse,
    IdResponse,
    MessageResponse,
    ModerateRequest,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductResponse,
    RegisterFarmerRequest,
    RegisterUserRequest,
    ReviewListResponse,
    ReviewResponse,
    SendMessageRequest,
    StatusResponse,
    SubmitReviewRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
)
from marketplace.farmer.registration import RegisterFarmer, VerifyFarmer, load_farmer
from marketplace.message import queries as message_queries
from marketplace.message.messaging import MarkConversationRead, MarkMessageRead, ModerateMessage, SendMessage
from marketplace.order.cancellation import CancelOrder
from marketplace.order.fulfillment import UpdateOrderStatus
from marketplace.order.placement import PlaceOrder
from marketplace.order.queries import OrderFilter, get_order, list_orders
from marketplace.product.ledger import load_product
from marketplace.product.listing import CreateProduct, DeleteProduct, UpdateProduct
from marketplace.product.queries import products_by_farmer, search_products
from marketplace.review.editing import EditReview
from marketplace.review.eligibility import can_review
from marketplace.review.moderation import ModerateReview
from marketplace.review.queries import (
    ReviewFilter,
    get_review,
    list_pending_reviews,
    list_reviews,
    list_reviews_for_user,
    my_reviews,
)
from marketplace.review.removal import DeleteReview
from marketplace.review.submission import SubmitReview
from marketplace.shared.principal import Principal
from marketplace.user.registration import RegisterUser

user_router = APIRouter(prefix="/users", tags=["users"])
farmer_router = APIRouter(prefix="/farmers", tags=["farmers"])
product_router = APIRouter(prefix="/products", tags=["products"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
review_router = APIRouter(prefix="/reviews", tags=["reviews"])
message_router = APIRouter(prefix="/messages", tags=["messages"])


def _farmer_response(farmer) -> FarmerResponse:
    return FarmerResponse(
        id=str(farmer.id),
        user_id=str(farmer.user_id),
        farm_name=farmer.farm_name,
        district=farmer.location.district,
        municipality=farmer.location.municipality,
        is_verified=farmer.is_verified,
        rating=farmer.rating,
        review_count=farmer.review_count,
    )


# ---------------------------------------------------------------------------
# Users & farmers
# ---------------------------------------------------------------------------
@user_router.post("", status_code=201, response_model=IdResponse)
async def register_user(body: RegisterUserRequest) -> IdResponse:
    command = RegisterUser(
        name=body.name,
        email=body.email,
        role=body.role.upper(),
        language=body.language,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@user_router.get("/{user_id}/reviews", response_model=list[ReviewResponse])
async def reviews_for_user(user_id: str, viewer: Principal | None = Depends(optional_principal)):
    """Reviews about a user; pending and rejected ones only for those allowed to see them."""
    return [ReviewResponse.model_validate(r) for r in list_reviews_for_user(user_id, viewer)]


@farmer_router.post("", status_code=201, response_model=IdResponse)
async def register_farmer(body: RegisterFarmerRequest, principal: Principal = Depends(current_principal)):
    command = RegisterFarmer(
        user_id=body.user_id or principal.user_id,
        actor_id=principal.user_id,
        actor_role=principal.role,
        farm_name=body.farm_name,
        district=body.district,
        municipality=body.municipality,
        latitude=body.latitude,
        longitude=body.longitude,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@farmer_router.put("/{farmer_id}/verify", response_model=StatusResponse)
async def verify_farmer(farmer_id: str, principal: Principal = Depends(current_principal)):
    command = VerifyFarmer(farmer_id=farmer_id, actor_id=principal.user_id, actor_role=principal.role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@farmer_router.get("/{farmer_id}", response_model=FarmerResponse)
async def farmer_profile(farmer_id: str):
    return _farmer_response(load_farmer(farmer_id))


@farmer_router.get("/{farmer_id}/products", response_model=list[ProductResponse])
async def farmer_products(farmer_id: str, principal: Principal | None = Depends(optional_principal)):
    farmer = load_farmer(farmer_id)
    # Owners and admins also see drafts and inactive listings
    include_unpublished = principal is not None and (
        principal.is_admin or principal.user_id == str(farmer.user_id)
    )
    products = products_by_farmer(farmer_id, include_unpublished=include_unpublished)
    return [ProductResponse.model_validate(p) for p in products]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@product_router.post("", status_code=201, response_model=IdResponse)
async def create_product(body: CreateProductRequest, principal: Principal = Depends(current_principal)):
    command = CreateProduct(
        actor_id=principal.user_id,
        name=body.name,
        description=body.description,
        price=body.price,
        stock=body.stock,
        category=body.category,
        unit=body.unit,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@product_router.get("", response_model=list[ProductResponse])
async def list_products(
    category: str | None = None,
    q: str | None = None,
    available_only: bool = False,
):
    products = search_products(category=category, text=q, available_only=available_only)
    return [ProductResponse.model_validate(p) for p in products]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_detail(product_id: str):
    return ProductResponse.model_validate(load_product(product_id))


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    principal: Principal = Depends(current_principal),
):
    command = UpdateProduct(
        product_id=product_id,
        actor_id=principal.user_id,
        actor_role=principal.role,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, principal: Principal = Depends(current_principal)):
    command = DeleteProduct(product_id=product_id, actor_id=principal.user_id, actor_role=principal.role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=IdResponse)
async def place_order(body: PlaceOrderRequest, principal: Principal = Depends(current_principal)):
    command = PlaceOrder(
        buyer_id=principal.user_id,
        farmer_id=body.farmer_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        delivery_address=body.delivery_address,
        notes=body.notes,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@order_router.get("", response_model=OrderListResponse)
async def orders(
    status: str | None = None,
    farmer_id: str | None = None,
    buyer_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(current_principal),
):
    result = list_orders(
        OrderFilter(status=status, farmer_id=farmer_id, buyer_id=buyer_id),
        principal,
        page=page,
        limit=limit,
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, principal: Principal = Depends(current_principal)):
    return OrderResponse.model_validate(get_order(order_id, principal))


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    principal: Principal = Depends(current_principal),
):
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status.upper(),
        actor_id=principal.user_id,
        actor_role=principal.role,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    principal: Principal = Depends(current_principal),
):
    command = CancelOrder(
        order_id=order_id,
        actor_id=principal.user_id,
        actor_role=principal.role,
        reason=body.reason if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.get("/{order_id}/review-eligibility", response_model=EligibilityResponse)
async def review_eligibility(order_id: str, principal: Principal = Depends(current_principal)):
    return EligibilityResponse(can_review=can_review(order_id, principal.user_id, principal.role))


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
@review_router.post("", status_code=201, response_model=IdResponse)
async def submit_review(body: SubmitReviewRequest, principal: Principal = Depends(current_principal)):
    command = SubmitReview(
        order_id=body.order_id,
        reviewer_id=principal.user_id,
        reviewer_role=principal.role,
        reviewee_id=body.reviewee_id,
        rating=body.rating,
        comment=body.comment,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


def _review_page(result) -> ReviewListResponse:
    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@review_router.get("", response_model=ReviewListResponse)
async def reviews(
    reviewer_id: str | None = None,
    reviewee_id: str | None = None,
    reviewer_role: str | None = None,
    approved: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    viewer: Principal | None = Depends(optional_principal),
):
    """Reviews matching the filters; ``approved`` only narrows the list for admins."""
    review_filter = ReviewFilter(
        reviewer_id=reviewer_id,
        reviewee_id=reviewee_id,
        reviewer_role=reviewer_role,
        approved=approved,
    )
    return _review_page(list_reviews(review_filter, viewer, page=page, limit=limit))


@review_router.get("/my-reviews", response_model=ReviewListResponse)
async def reviews_of_mine(
    type_: str = Query(default="given", alias="type"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(current_principal),
):
    return _review_page(my_reviews(principal, type_, page=page, limit=limit))


@review_router.get("/pending", response_model=list[ReviewResponse])
async def pending_reviews(principal: Principal = Depends(current_principal)):
    return [ReviewResponse.model_validate(r) for r in list_pending_reviews(principal)]


@review_router.get("/{review_id}", response_model=ReviewResponse)
async def review_detail(review_id: str, viewer: Principal | None = Depends(optional_principal)):
    return ReviewResponse.model_validate(get_review(review_id, viewer))


@review_router.put("/{review_id}", response_model=StatusResponse)
async def edit_review(review_id: str, body: EditReviewRequest, principal: Principal = Depends(current_principal)):
    command = EditReview(
        review_id=review_id,
        reviewer_id=principal.user_id,
        rating=body.rating,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.put("/{review_id}/moderate", response_model=StatusResponse)
async def moderate_review(review_id: str, body: ModerateRequest, principal: Principal = Depends(current_principal)):
    command = ModerateReview(
        review_id=review_id,
        moderator_id=principal.user_id,
        moderator_role=principal.role,
        action=body.action,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(review_id: str, principal: Principal = Depends(current_principal)):
    command = DeleteReview(review_id=review_id, actor_id=principal.user_id, actor_role=principal.role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
@message_router.post("", status_code=201, response_model=IdResponse)
async def send_message(body: SendMessageRequest, principal: Principal = Depends(current_principal)):
    command = SendMessage(
        sender_id=principal.user_id,
        receiver_id=body.receiver_id,
        content=body.content,
        language=body.language,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@message_router.get("/conversations", response_model=list[ConversationSummaryResponse])
async def conversations(principal: Principal = Depends(current_principal)):
    return [
        ConversationSummaryResponse(
            partner_id=summary.partner_id,
            last_message=MessageResponse.model_validate(summary.last_message),
            unread_count=summary.unread_count,
        )
        for summary in message_queries.conversation_list(principal)
    ]


@message_router.get("/conversations/{partner_id}", response_model=list[MessageResponse])
async def conversation(partner_id: str, principal: Principal = Depends(current_principal)):
    messages = message_queries.conversation(principal.user_id, partner_id, principal)
    return [MessageResponse.model_validate(m) for m in messages]


@message_router.put("/conversations/{partner_id}/read", response_model=CountResponse)
async def mark_conversation_read(partner_id: str, principal: Principal = Depends(current_principal)):
    command = MarkConversationRead(actor_id=principal.user_id, partner_id=partner_id)
    return CountResponse(count=current_domain.process(command, asynchronous=False))


@message_router.get("/unread-count", response_model=CountResponse)
async def unread_count(principal: Principal = Depends(current_principal)):
    return CountResponse(count=message_queries.unread_count(principal.user_id))


@message_router.get("/moderation-queue", response_model=list[MessageResponse])
async def message_moderation_queue(principal: Principal = Depends(current_principal)):
    return [MessageResponse.model_validate(m) for m in message_queries.moderation_queue(principal)]


@message_router.put("/{message_id}/read", response_model=StatusResponse)
async def mark_message_read(message_id: str, principal: Principal = Depends(current_principal)):
    command = MarkMessageRead(message_id=message_id, actor_id=principal.user_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@message_router.put("/{message_id}/moderate", response_model=StatusResponse)
async def moderate_message(message_id: str, body: ModerateRequest, principal: Principal = Depends(current_principal)):
    command = ModerateMessage(
        message_id=message_id,
        moderator_id=principal.user_id,
        moderator_role=principal.role,
        flag=body.action,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
