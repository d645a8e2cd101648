"""Stock request endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import (
    RequestActionNotice,
    StockRequestCreate,
    StockRequestDeleteResponse,
    StockRequestMutationResponse,
    StockRequestReject,
    StockRequestResponse,
    StockRequestUpdate,
)
from ..services.request_response_builder import requests_to_response
from ..services.request_rules import now_utc
from ..use_cases.request_lifecycle import (
    RequestMutationOutcome,
    approve_request_use_case,
    cancel_request_use_case,
    create_request_use_case,
    delete_request_use_case,
    get_request_use_case,
    list_requests_use_case,
    reject_request_use_case,
    update_request_use_case,
)

router = APIRouter(prefix="/requests", tags=["requests"])


def _single_response(db: Session, request) -> StockRequestResponse:
    return requests_to_response(db, [request])[0]


def _action_notice(
    *,
    outcome: RequestMutationOutcome,
    action: str,
    current_user: User,
) -> RequestActionNotice | None:
    owner = outcome.acted_on_owner
    if owner is None:
        return None
    return RequestActionNotice(
        action=action,
        performed_by=current_user.name or "Admin",
        performed_by_role=current_user.role,
        request_owner=owner.name or "User",
        timestamp=now_utc(),
    )


@router.get("", response_model=list[StockRequestResponse])
def get_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Admins get every request, staff only their own."""
    requests = list_requests_use_case(db=db, current_user=current_user)
    return requests_to_response(db, requests)


@router.get("/{request_id}", response_model=StockRequestResponse)
def get_request(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    request = get_request_use_case(db=db, request_id=request_id, current_user=current_user)
    return _single_response(db, request)


@router.post("", response_model=StockRequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: StockRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = create_request_use_case(db=db, data=payload, current_user=current_user)
    return _single_response(db, outcome.request)


@router.put("/{request_id}", response_model=StockRequestMutationResponse)
def update_request(
    request_id: UUID,
    payload: StockRequestUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = update_request_use_case(
        db=db,
        request_id=request_id,
        data=payload,
        current_user=current_user,
    )
    return StockRequestMutationResponse(
        data=_single_response(db, outcome.request),
        notification=_action_notice(outcome=outcome, action="updated", current_user=current_user),
    )


@router.delete("/{request_id}", response_model=StockRequestDeleteResponse)
def delete_request(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = delete_request_use_case(db=db, request_id=request_id, current_user=current_user)
    notice = _action_notice(outcome=outcome, action="deleted", current_user=current_user)
    message = "Request deleted successfully"
    if notice is not None:
        message = f"Admin ({notice.performed_by}) deleted request from {notice.request_owner}"
    return StockRequestDeleteResponse(message=message, notification=notice)


@router.post("/{request_id}/cancel", response_model=StockRequestResponse)
def cancel_request(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    request = cancel_request_use_case(db=db, request_id=request_id, current_user=current_user)
    return _single_response(db, request)


@router.post("/{request_id}/approve", response_model=StockRequestResponse)
def approve_request(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    request = approve_request_use_case(db=db, request_id=request_id, current_user=current_user)
    return _single_response(db, request)


@router.post("/{request_id}/reject", response_model=StockRequestResponse)
def reject_request(
    request_id: UUID,
    payload: StockRequestReject,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    request = reject_request_use_case(
        db=db,
        request_id=request_id,
        current_user=current_user,
        rejection_reason=payload.rejection_reason,
    )
    return _single_response(db, request)
