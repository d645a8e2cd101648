from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from stockroom.domain_errors import DomainError
from stockroom.models import Product, StockRequest
from stockroom.schemas import ProductCreate, ProductUpdate
from stockroom.use_cases.product_catalog import (
    create_product_use_case,
    delete_product_use_case,
    get_product_use_case,
    update_product_use_case,
)


class _QueryStub:
    def __init__(self, *, first_results=(), count_result=0):
        self._first_results = list(first_results)
        self._count_result = count_result

    def filter(self, *_args, **_kwargs):
        return self

    def first(self):
        return self._first_results.pop(0) if self._first_results else None

    def count(self):
        return self._count_result


class _SessionStub:
    def __init__(self, *, products=(), request_count=0):
        self._product_query = _QueryStub(first_results=products)
        self._request_query = _QueryStub(count_result=request_count)
        self.added = []
        self.deleted = []
        self.commit_calls = 0

    def query(self, model):
        if model is Product:
            return self._product_query
        if model is StockRequest:
            return self._request_query
        raise AssertionError(f"Unexpected query model: {model}")

    def add(self, obj):
        self.added.append(obj)

    def delete(self, obj):
        self.deleted.append(obj)

    def commit(self):
        self.commit_calls += 1

    def refresh(self, _obj):
        return None


ADMIN = SimpleNamespace(id=uuid4(), role="admin")
STAFF = SimpleNamespace(id=uuid4(), role="staff")


def _product(*, is_active=True, sku="TOOL-DRL-001"):
    return SimpleNamespace(id=uuid4(), sku=sku, name="Cordless Drill", is_active=is_active, stock_quantity=5)


def test_create_product_strips_identifiers() -> None:
    db = _SessionStub()

    product = create_product_use_case(
        db=db,
        data=ProductCreate(name=" Drill ", sku=" TOOL-1 ", category=" tools ", price=Decimal("9.90"), stock_quantity=4),
        current_user=ADMIN,
    )

    assert isinstance(product, Product)
    assert (product.name, product.sku, product.category) == ("Drill", "TOOL-1", "tools")
    assert product.is_active is True
    assert db.added == [product]


def test_create_product_with_taken_sku_conflicts() -> None:
    db = _SessionStub(products=[_product(sku="TOOL-1")])

    with pytest.raises(DomainError) as exc_info:
        create_product_use_case(
            db=db,
            data=ProductCreate(name="Drill", sku="TOOL-1", category="tools", price=Decimal("1")),
            current_user=ADMIN,
        )

    assert exc_info.value.http_status == 409
    assert exc_info.value.code == "PRODUCT_SKU_TAKEN"
    assert db.added == []


def test_inactive_product_is_hidden_from_staff_but_visible_to_admin() -> None:
    inactive = _product(is_active=False)

    with pytest.raises(DomainError) as exc_info:
        get_product_use_case(db=_SessionStub(products=[inactive]), product_id=inactive.id, current_user=STAFF)
    assert exc_info.value.http_status == 404

    assert get_product_use_case(db=_SessionStub(products=[inactive]), product_id=inactive.id, current_user=ADMIN) is inactive


def test_update_product_applies_only_provided_fields() -> None:
    product = _product()
    db = _SessionStub(products=[product])

    update_product_use_case(
        db=db,
        product_id=product.id,
        data=ProductUpdate(stock_quantity=40),
        current_user=ADMIN,
    )

    assert product.stock_quantity == 40
    assert product.name == "Cordless Drill"
    assert db.commit_calls == 1


def test_delete_referenced_product_only_deactivates_it() -> None:
    product = _product()
    db = _SessionStub(products=[product], request_count=2)

    deleted = delete_product_use_case(db=db, product_id=product.id, current_user=ADMIN)

    assert deleted is False
    assert product.is_active is False
    assert db.deleted == []


def test_delete_unreferenced_product_removes_row() -> None:
    product = _product()
    db = _SessionStub(products=[product], request_count=0)

    assert delete_product_use_case(db=db, product_id=product.id, current_user=ADMIN) is True
    assert db.deleted == [product]
