"""Read-only lookups consumed by the request workflow."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from ..models import Product, StockRequest, User


def get_user_by_id(db: Session, user_id: UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def list_admin_users(db: Session) -> list[User]:
    """Current admin set, queried per call so role changes are never served stale."""
    return db.query(User).filter(
        User.role == "admin",
        User.is_active == True,  # noqa: E712
    ).order_by(User.created_at.asc()).all()


def get_product_by_id(db: Session, product_id: UUID) -> Product | None:
    return db.query(Product).filter(Product.id == product_id).first()


def get_request_by_id(db: Session, request_id: UUID) -> StockRequest | None:
    return db.query(StockRequest).filter(StockRequest.id == request_id).first()


def query_requests(db: Session, *, owner_id: UUID | None = None) -> list[StockRequest]:
    """Requests newest first, optionally restricted to one owner."""
    query = db.query(StockRequest)
    if owner_id is not None:
        query = query.filter(StockRequest.user_id == owner_id)
    return query.order_by(StockRequest.created_at.desc()).all()


def count_requests_for_product(db: Session, product_id: UUID) -> int:
    return db.query(StockRequest).filter(StockRequest.product_id == product_id).count()
