"""Normalisation of reference fields that arrive either as ids or expanded records."""
from __future__ import annotations

from typing import Any
from uuid import UUID


def reference_id(value: Any) -> UUID | None:
    """Collapse a bare id or an expanded record into a bare UUID.

    Accepted shapes: ``UUID``, id string, mapping with ``id`` or ``_id``, or any
    object exposing an ``id`` attribute (ORM rows, response models).
    """
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        return UUID(value.strip())
    if isinstance(value, dict):
        raw = value.get("id", value.get("_id"))
        if raw is None:
            raise ValueError("Reference record has no id")
        return reference_id(raw)
    raw = getattr(value, "id", None)
    if raw is None:
        raise ValueError(f"Unsupported reference value: {type(value).__name__}")
    return reference_id(raw)
