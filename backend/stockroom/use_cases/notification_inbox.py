"""Notification inbox use-cases, always scoped to the calling recipient."""
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from ..domain_errors import ForbiddenError, NotFoundError
from ..models import Notification, User
from ..services.request_rules import now_utc

logger = logging.getLogger(__name__)


def _get_owned_notification(
    *,
    db: Session,
    notification_id: UUID,
    current_user: User,
    denied_message: str,
) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
    ).first()
    if not notification:
        raise NotFoundError(
            code="NOTIFICATION_NOT_FOUND",
            message="Notification not found",
        )
    if notification.recipient_id != current_user.id:
        raise ForbiddenError(
            code="NOTIFICATION_ACCESS_DENIED",
            message=denied_message,
        )
    return notification


def get_unread_count_use_case(*, db: Session, current_user: User) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == current_user.id,
        Notification.is_read == False,  # noqa: E712
    ).count()


def list_notifications_use_case(*, db: Session, current_user: User) -> tuple[list[Notification], int]:
    """Return the caller's notifications newest first, with the unread count."""
    notifications = (
        db.query(Notification)
        .filter(Notification.recipient_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .all()
    )
    return notifications, get_unread_count_use_case(db=db, current_user=current_user)


def mark_notification_read_use_case(
    *,
    db: Session,
    notification_id: UUID,
    current_user: User,
    now: datetime | None = None,
) -> Notification:
    """Idempotent: marking an already read notification refreshes read_at."""
    notification = _get_owned_notification(
        db=db,
        notification_id=notification_id,
        current_user=current_user,
        denied_message="Not authorized to mark this notification as read",
    )
    notification.is_read = True
    notification.read_at = now or now_utc()
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_notifications_read_use_case(
    *,
    db: Session,
    current_user: User,
    now: datetime | None = None,
) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == current_user.id,
        Notification.is_read == False,  # noqa: E712
    ).update(
        {"is_read": True, "read_at": now or now_utc()},
        synchronize_session=False,
    )
    db.commit()
    logger.info("notifications.read_all user=%s updated=%s", current_user.id, updated)
    return updated


def delete_notification_use_case(*, db: Session, notification_id: UUID, current_user: User) -> None:
    notification = _get_owned_notification(
        db=db,
        notification_id=notification_id,
        current_user=current_user,
        denied_message="Not authorized to delete this notification",
    )
    db.delete(notification)
    db.commit()
