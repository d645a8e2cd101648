"""Notification fan-out for stock request events.

Drafts are built first with every field populated, then each one is written
and committed on its own. A failed write is rolled back and logged; it never
undoes the request change that triggered it and never blocks the remaining
recipients. Delivery is at-most-once: failed rows are not retried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Notification
from .request_rules import format_request_date, transaction_type_label

logger = logging.getLogger(__name__)

REQUEST_CREATED = "request_created"
REQUEST_UPDATED = "request_updated"
REQUEST_DELETED = "request_deleted"


@dataclass(frozen=True)
class NotificationDraft:
    recipient_id: UUID
    sender_id: UUID
    type: str
    title: str
    message: str
    related_request_id: UUID | None = None
    related_product_id: UUID | None = None


def _product_labels(product) -> tuple[str, str]:
    if product is None:
        return "Unknown Product", ""
    return product.name, product.sku


def request_created_drafts(*, request, creator, product, admins: Iterable) -> list[NotificationDraft]:
    """One draft per admin for a request created by staff."""
    name, sku = _product_labels(product)
    label = transaction_type_label(request.transaction_type)
    message = (
        f"{creator.name} created a new {label} request for {name} ({sku})"
        f" - Quantity: {request.item_amount} units"
    )
    return [
        NotificationDraft(
            recipient_id=admin.id,
            sender_id=creator.id,
            type=REQUEST_CREATED,
            title="New request requires your attention",
            message=message,
            related_request_id=request.id,
            related_product_id=request.product_id,
        )
        for admin in admins
    ]


def request_updated_draft(*, request, actor, product) -> NotificationDraft:
    name, sku = _product_labels(product)
    label = transaction_type_label(request.transaction_type)
    return NotificationDraft(
        recipient_id=request.user_id,
        sender_id=actor.id,
        type=REQUEST_UPDATED,
        title="Your request has been updated",
        message=(
            f"Admin {actor.name} updated your {label} request for {name} ({sku})"
            f" - Quantity: {request.item_amount} units"
        ),
        related_request_id=request.id,
        related_product_id=request.product_id,
    )


def request_deleted_draft(*, request, actor, product) -> NotificationDraft:
    """Built before the delete; the request id is not linked since the row goes away."""
    name, sku = _product_labels(product)
    label = transaction_type_label(request.transaction_type)
    actor_name = actor.name or "Admin"
    return NotificationDraft(
        recipient_id=request.user_id,
        sender_id=actor.id,
        type=REQUEST_DELETED,
        title="Your request has been deleted",
        message=(
            f"Admin {actor_name} deleted your {label} request for {name} ({sku})"
            f" - {request.item_amount} units."
            f" Request date: {format_request_date(request.transaction_date)}"
        ),
        related_product_id=request.product_id,
    )


def deliver_notifications(db: Session, drafts: Iterable[NotificationDraft]) -> list[Notification]:
    """Persist drafts one by one and return the notifications that were written."""
    delivered: list[Notification] = []
    for draft in drafts:
        notification = Notification(
            id=uuid4(),
            recipient_id=draft.recipient_id,
            sender_id=draft.sender_id,
            type=draft.type,
            title=draft.title,
            message=draft.message,
            related_request_id=draft.related_request_id,
            related_product_id=draft.related_product_id,
            is_read=False,
        )
        try:
            db.add(notification)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Failed to write %s notification for recipient=%s",
                draft.type,
                draft.recipient_id,
            )
            continue
        delivered.append(notification)

    if delivered:
        logger.info("notifications.delivered type=%s count=%d", delivered[0].type, len(delivered))
    return delivered
