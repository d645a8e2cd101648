"""Notification inbox endpoints. Clients poll these; there is no push channel."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import settings
from ..database import get_db
from ..models import User
from ..schemas import NotificationListResponse, NotificationResponse, UnreadCountResponse
from ..services.request_response_builder import notifications_to_response
from ..use_cases.notification_inbox import (
    delete_notification_use_case,
    get_unread_count_use_case,
    list_notifications_use_case,
    mark_all_notifications_read_use_case,
    mark_notification_read_use_case,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def get_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notifications, unread_count = list_notifications_use_case(db=db, current_user=current_user)
    return NotificationListResponse(
        notifications=notifications_to_response(db, notifications),
        unread_count=unread_count,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return UnreadCountResponse(
        count=get_unread_count_use_case(db=db, current_user=current_user),
        poll_interval_seconds=settings.NOTIFICATION_POLL_INTERVAL_SECONDS,
    )


@router.put("/read-all", status_code=status.HTTP_204_NO_CONTENT)
def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    mark_all_notifications_read_use_case(db=db, current_user=current_user)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = mark_notification_read_use_case(
        db=db,
        notification_id=notification_id,
        current_user=current_user,
    )
    return notifications_to_response(db, [notification])[0]


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_notification_use_case(db=db, notification_id=notification_id, current_user=current_user)
