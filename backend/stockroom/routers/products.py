"""Product endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import PermissionChecker, get_current_user
from ..database import get_db
from ..models import User
from ..schemas import ProductCreate, ProductDeleteResponse, ProductResponse, ProductUpdate
from ..use_cases.product_catalog import (
    create_product_use_case,
    delete_product_use_case,
    get_product_use_case,
    list_products_use_case,
    update_product_use_case,
)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductResponse])
def get_products(
    include_inactive: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List products; inactive ones only for admins who ask for them."""
    products = list_products_use_case(db=db, current_user=current_user, include_inactive=include_inactive)
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = get_product_use_case(db=db, product_id=product_id, current_user=current_user)
    return ProductResponse.model_validate(product)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    current_user: User = Depends(PermissionChecker("canManageProducts")),
    db: Session = Depends(get_db),
):
    product = create_product_use_case(db=db, data=payload, current_user=current_user)
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: UUID,
    payload: ProductUpdate,
    current_user: User = Depends(PermissionChecker("canManageProducts")),
    db: Session = Depends(get_db),
):
    product = update_product_use_case(db=db, product_id=product_id, data=payload, current_user=current_user)
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", response_model=ProductDeleteResponse)
def delete_product(
    product_id: UUID,
    current_user: User = Depends(PermissionChecker("canManageProducts")),
    db: Session = Depends(get_db),
):
    """Delete an unreferenced product, or deactivate one that requests still point at."""
    deleted = delete_product_use_case(db=db, product_id=product_id, current_user=current_user)
    return ProductDeleteResponse(id=product_id, deleted=deleted, deactivated=not deleted)
