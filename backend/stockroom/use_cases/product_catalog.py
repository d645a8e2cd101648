"""Product catalog use-cases (browse for everyone, manage for admins)."""
from __future__ import annotations

import logging
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from ..domain_errors import DomainError, NotFoundError
from ..models import Product, User
from ..schemas import ProductCreate, ProductUpdate
from ..services.directory import count_requests_for_product
from ..services.request_policy import is_admin

logger = logging.getLogger(__name__)


def _get_product_or_404(*, db: Session, product_id: UUID, current_user: User) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    # Inactive products are hidden from staff.
    if not product or (not product.is_active and not is_admin(current_user.role)):
        raise NotFoundError(
            code="PRODUCT_NOT_FOUND",
            message="Product not found",
        )
    return product


def _ensure_sku_free(*, db: Session, sku: str, exclude_id: UUID | None = None) -> None:
    query = db.query(Product).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise DomainError(
            code="PRODUCT_SKU_TAKEN",
            http_status=409,
            message=f"SKU {sku} is already in use",
        )


def list_products_use_case(*, db: Session, current_user: User, include_inactive: bool = False) -> list[Product]:
    query = db.query(Product)
    if not (include_inactive and is_admin(current_user.role)):
        query = query.filter(Product.is_active == True)  # noqa: E712
    return query.order_by(Product.name.asc()).all()


def get_product_use_case(*, db: Session, product_id: UUID, current_user: User) -> Product:
    return _get_product_or_404(db=db, product_id=product_id, current_user=current_user)


def create_product_use_case(*, db: Session, data: ProductCreate, current_user: User) -> Product:
    sku = data.sku.strip()
    _ensure_sku_free(db=db, sku=sku)
    product = Product(
        id=uuid4(),
        name=data.name.strip(),
        sku=sku,
        description=data.description,
        category=data.category.strip(),
        price=data.price,
        stock_quantity=data.stock_quantity,
        unit=data.unit,
        picture=data.picture,
        is_active=True,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("product.created id=%s sku=%s by=%s", product.id, product.sku, current_user.id)
    return product


def update_product_use_case(
    *,
    db: Session,
    product_id: UUID,
    data: ProductUpdate,
    current_user: User,
) -> Product:
    product = _get_product_or_404(db=db, product_id=product_id, current_user=current_user)
    payload = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}

    if "sku" in payload:
        payload["sku"] = payload["sku"].strip()
        if payload["sku"] != product.sku:
            _ensure_sku_free(db=db, sku=payload["sku"], exclude_id=product.id)

    for key, value in payload.items():
        setattr(product, key, value)

    db.commit()
    db.refresh(product)
    logger.info("product.updated id=%s by=%s fields=%s", product.id, current_user.id, sorted(payload))
    return product


def delete_product_use_case(*, db: Session, product_id: UUID, current_user: User) -> bool:
    """Hard-delete an unreferenced product; deactivate it otherwise.

    Returns True when the row was removed, False when it was only deactivated.
    """
    product = _get_product_or_404(db=db, product_id=product_id, current_user=current_user)

    if count_requests_for_product(db, product.id) > 0:
        product.is_active = False
        db.commit()
        logger.info("product.deactivated id=%s by=%s", product.id, current_user.id)
        return False

    db.delete(product)
    db.commit()
    logger.info("product.deleted id=%s by=%s", product_id, current_user.id)
    return True
