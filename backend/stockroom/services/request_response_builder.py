"""Request and notification serialization with batched relation loading.

Responses carry both the bare reference ids and the expanded records, so
callers never have to branch on which representation they received.
"""
from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from ..models import Notification, Product, StockRequest, User
from ..schemas import (
    ActivityEntryResponse,
    NotificationResponse,
    ProductBrief,
    StockRequestResponse,
    UserBrief,
)


def _load_users(db: Session, user_ids: set[UUID]) -> dict[UUID, User]:
    if not user_ids:
        return {}
    users = db.query(User).filter(User.id.in_(user_ids)).all()
    return {user.id: user for user in users}


def _load_products(db: Session, product_ids: set[UUID]) -> dict[UUID, Product]:
    if not product_ids:
        return {}
    products = db.query(Product).filter(Product.id.in_(product_ids)).all()
    return {product.id: product for product in products}


def _user_brief(users_by_id: dict, user_id: UUID | None) -> UserBrief | None:
    user = users_by_id.get(user_id) if user_id else None
    return UserBrief.model_validate(user) if user else None


def _product_brief(products_by_id: dict, product_id: UUID | None) -> ProductBrief | None:
    product = products_by_id.get(product_id) if product_id else None
    return ProductBrief.model_validate(product) if product else None


def build_request_response_context(db: Session, requests: list[StockRequest]) -> dict:
    """Preload users and products referenced by a page of requests."""
    user_ids: set[UUID] = set()
    product_ids: set[UUID] = set()
    for request in requests:
        user_ids.add(request.user_id)
        product_ids.add(request.product_id)
        if request.last_modified_by_id:
            user_ids.add(request.last_modified_by_id)
        for entry in request.activity_log:
            user_ids.add(entry.performed_by_id)

    return {
        "users_by_id": _load_users(db, user_ids),
        "products_by_id": _load_products(db, product_ids),
    }


def request_to_response(request: StockRequest, context: dict) -> StockRequestResponse:
    users_by_id = context["users_by_id"]
    products_by_id = context["products_by_id"]
    return StockRequestResponse(
        id=request.id,
        user_id=request.user_id,
        user=_user_brief(users_by_id, request.user_id),
        product_id=request.product_id,
        product=_product_brief(products_by_id, request.product_id),
        transaction_type=request.transaction_type,
        item_amount=request.item_amount,
        transaction_date=request.transaction_date,
        status=request.status,
        approved_by_id=request.approved_by_id,
        approved_at=request.approved_at,
        rejection_reason=request.rejection_reason,
        last_modified_by_id=request.last_modified_by_id,
        last_modified_by=_user_brief(users_by_id, request.last_modified_by_id),
        activity_log=[
            ActivityEntryResponse(
                action=entry.action,
                performed_by_id=entry.performed_by_id,
                performed_by=_user_brief(users_by_id, entry.performed_by_id),
                performed_at=entry.performed_at,
                details=entry.details,
            )
            for entry in request.activity_log
        ],
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def requests_to_response(db: Session, requests: list[StockRequest]) -> list[StockRequestResponse]:
    context = build_request_response_context(db, requests)
    return [request_to_response(request, context) for request in requests]


def notifications_to_response(db: Session, notifications: list[Notification]) -> list[NotificationResponse]:
    users_by_id = _load_users(db, {n.sender_id for n in notifications})
    products_by_id = _load_products(db, {n.related_product_id for n in notifications if n.related_product_id})
    return [
        NotificationResponse(
            id=n.id,
            recipient_id=n.recipient_id,
            sender_id=n.sender_id,
            sender=_user_brief(users_by_id, n.sender_id),
            type=n.type,
            title=n.title,
            message=n.message,
            related_request_id=n.related_request_id,
            related_product_id=n.related_product_id,
            related_product=_product_brief(products_by_id, n.related_product_id),
            is_read=n.is_read,
            read_at=n.read_at,
            created_at=n.created_at,
        )
        for n in notifications
    ]
