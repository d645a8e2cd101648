from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from stockroom.database import Base
from stockroom.models import Product, RequestActivity, StockRequest, User
from stockroom.schemas import StockRequestUpdate
from stockroom.use_cases.request_lifecycle import approve_request_use_case, update_request_use_case


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'stockroom.db'}")
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    staff_id, admin_id, product_id, request_id = uuid4(), uuid4(), uuid4(), uuid4()
    db = session_factory()
    db.add_all(
        [
            User(id=staff_id, name="Sam Staff", email="staff@stockroom.local", password_hash="x", role="staff"),
            User(id=admin_id, name="Ada Admin", email="admin@stockroom.local", password_hash="x", role="admin"),
            Product(
                id=product_id,
                name="Cordless Drill",
                sku="TOOL-DRL-001",
                category="tools",
                price=Decimal("89.90"),
                stock_quantity=100,
            ),
        ]
    )
    db.flush()
    request = StockRequest(
        id=request_id,
        user_id=staff_id,
        product_id=product_id,
        transaction_type="stockOut",
        item_amount=5,
        transaction_date=date(2026, 3, 5),
        status="pending",
    )
    request.activity_log.append(
        RequestActivity(
            id=uuid4(),
            action="created",
            performed_by_id=staff_id,
            performed_at=datetime(2026, 3, 5, 8, 0, tzinfo=timezone.utc),
            details="Created by staff",
        )
    )
    db.add(request)
    db.commit()
    db.close()
    return {"staff_id": staff_id, "admin_id": admin_id, "request_id": request_id}


def _load_both(session_factory, seeded):
    """Two sessions that have read the request and its log before either writes."""
    staff_db = session_factory()
    admin_db = session_factory()
    for db in (staff_db, admin_db):
        assert len(db.get(StockRequest, seeded["request_id"]).activity_log) == 1
    return staff_db, admin_db


def test_overlapping_edits_both_commit_and_last_writer_wins(session_factory, seeded) -> None:
    staff_db, admin_db = _load_both(session_factory, seeded)

    update_request_use_case(
        db=staff_db,
        request_id=seeded["request_id"],
        data=StockRequestUpdate(item_amount=8),
        current_user=staff_db.get(User, seeded["staff_id"]),
    )
    outcome = update_request_use_case(
        db=admin_db,
        request_id=seeded["request_id"],
        data=StockRequestUpdate(item_amount=12),
        current_user=admin_db.get(User, seeded["admin_id"]),
    )
    staff_db.close()
    admin_db.close()

    assert [n.recipient_id for n in outcome.notifications] == [seeded["staff_id"]]

    check_db = session_factory()
    request = check_db.get(StockRequest, seeded["request_id"])
    assert request.item_amount == 12
    assert request.last_modified_by_id == seeded["admin_id"]
    assert [entry.action for entry in request.activity_log] == ["created", "updated", "updated"]
    assert [entry.performed_by_id for entry in request.activity_log] == [
        seeded["staff_id"],
        seeded["staff_id"],
        seeded["admin_id"],
    ]
    check_db.close()


def test_edit_racing_an_approval_does_not_fail_the_approval(session_factory, seeded) -> None:
    staff_db, admin_db = _load_both(session_factory, seeded)

    update_request_use_case(
        db=staff_db,
        request_id=seeded["request_id"],
        data=StockRequestUpdate(item_amount=7),
        current_user=staff_db.get(User, seeded["staff_id"]),
    )
    approved = approve_request_use_case(
        db=admin_db,
        request_id=seeded["request_id"],
        current_user=admin_db.get(User, seeded["admin_id"]),
    )
    assert approved.status == "approved"
    staff_db.close()
    admin_db.close()

    check_db = session_factory()
    request = check_db.get(StockRequest, seeded["request_id"])
    assert request.status == "approved"
    assert request.approved_by_id == seeded["admin_id"]
    assert [entry.action for entry in request.activity_log] == ["created", "updated", "approved"]
    check_db.close()
