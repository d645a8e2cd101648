from __future__ import annotations

import logging
from datetime import date
from types import SimpleNamespace
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from stockroom.services.notification_fanout import (
    NotificationDraft,
    deliver_notifications,
    request_created_drafts,
    request_deleted_draft,
)


class _SessionStub:
    def __init__(self, *, failing_commits: set[int] | None = None) -> None:
        self.added: list[object] = []
        self.commit_calls = 0
        self.rollback_calls = 0
        self._failing_commits = failing_commits or set()

    def add(self, obj: object) -> None:
        self.added.append(obj)

    def commit(self) -> None:
        self.commit_calls += 1
        if self.commit_calls in self._failing_commits:
            raise IntegrityError("INSERT INTO notifications", {}, Exception("fk violation"))

    def rollback(self) -> None:
        self.rollback_calls += 1


def _request(**overrides):
    values = {
        "id": uuid4(),
        "user_id": uuid4(),
        "product_id": uuid4(),
        "transaction_type": "stockIn",
        "item_amount": 12,
        "transaction_date": date(2026, 11, 2),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _draft(recipient_id=None) -> NotificationDraft:
    return NotificationDraft(
        recipient_id=recipient_id or uuid4(),
        sender_id=uuid4(),
        type="request_created",
        title="New request requires your attention",
        message="probe",
    )


def test_created_drafts_fall_back_to_unknown_product() -> None:
    creator = SimpleNamespace(id=uuid4(), name="Sam Staff")
    admins = [SimpleNamespace(id=uuid4())]

    drafts = request_created_drafts(request=_request(), creator=creator, product=None, admins=admins)

    assert len(drafts) == 1
    assert drafts[0].message == (
        "Sam Staff created a new Stock In request for Unknown Product () - Quantity: 12 units"
    )


def test_created_drafts_with_no_admins_is_empty() -> None:
    creator = SimpleNamespace(id=uuid4(), name="Sam Staff")
    assert request_created_drafts(request=_request(), creator=creator, product=None, admins=[]) == []


def test_deleted_draft_has_no_request_link_and_uses_month_day_year() -> None:
    request = _request(transaction_type="stockOut", item_amount=3)
    actor = SimpleNamespace(id=uuid4(), name=None)
    product = SimpleNamespace(name="Safety Gloves", sku="PPE-GLV-010")

    draft = request_deleted_draft(request=request, actor=actor, product=product)

    assert draft.recipient_id == request.user_id
    assert draft.related_request_id is None
    assert draft.related_product_id == request.product_id
    assert draft.message == (
        "Admin Admin deleted your Stock Out request for Safety Gloves (PPE-GLV-010)"
        " - 3 units. Request date: 11/2/2026"
    )


def test_deliver_commits_each_notification_separately() -> None:
    db = _SessionStub()
    drafts = [_draft(), _draft(), _draft()]

    delivered = deliver_notifications(db, drafts)

    assert [n.recipient_id for n in delivered] == [d.recipient_id for d in drafts]
    assert all(n.is_read is False for n in delivered)
    assert db.commit_calls == 3


def test_failed_write_is_logged_and_remaining_recipients_still_get_theirs(caplog) -> None:
    db = _SessionStub(failing_commits={1})
    drafts = [_draft(), _draft()]

    with caplog.at_level(logging.ERROR, logger="stockroom.services.notification_fanout"):
        delivered = deliver_notifications(db, drafts)

    assert [n.recipient_id for n in delivered] == [drafts[1].recipient_id]
    assert db.rollback_calls == 1
    assert "Failed to write request_created notification" in caplog.text
