from __future__ import annotations

from datetime import date
from types import SimpleNamespace
from uuid import uuid4

import pytest
from pydantic import ValidationError

from stockroom.schemas import StockRequestCreate
from stockroom.services.references import reference_id


def test_reference_id_accepts_every_reference_shape() -> None:
    value = uuid4()

    assert reference_id(value) == value
    assert reference_id(f" {value} ") == value
    assert reference_id({"id": str(value), "name": "Drill"}) == value
    assert reference_id({"_id": str(value)}) == value
    assert reference_id(SimpleNamespace(id=value, name="Drill")) == value
    assert reference_id(None) is None


def test_reference_id_rejects_record_without_id() -> None:
    with pytest.raises(ValueError):
        reference_id({"name": "Drill"})


def test_request_payload_rejects_malformed_reference() -> None:
    with pytest.raises(ValidationError):
        StockRequestCreate(
            product_id="not-a-uuid",
            transaction_type="stockIn",
            item_amount=1,
            transaction_date=date(2026, 3, 5),
        )


def test_request_payload_rejects_unknown_transaction_type() -> None:
    with pytest.raises(ValidationError):
        StockRequestCreate(
            product_id=str(uuid4()),
            transaction_type="transfer",
            item_amount=1,
            transaction_date=date(2026, 3, 5),
        )
