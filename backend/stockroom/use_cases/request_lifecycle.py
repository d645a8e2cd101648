"""Stock request lifecycle use-cases used by request router endpoints."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..domain_errors import NotFoundError
from ..models import Notification, Product, StockRequest, User
from ..schemas import StockRequestCreate, StockRequestUpdate
from ..services import request_policy as policy
from ..services import request_rules as rules
from ..services.activity_log import append_activity
from ..services.directory import (
    get_product_by_id,
    get_request_by_id,
    get_user_by_id,
    list_admin_users,
    query_requests,
)
from ..services.notification_fanout import (
    deliver_notifications,
    request_created_drafts,
    request_deleted_draft,
    request_updated_draft,
)

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS: tuple[str, ...] = (
    "product_id",
    "transaction_type",
    "item_amount",
    "transaction_date",
)


@dataclass(frozen=True)
class RequestUseCaseHooks:
    """Collaborator lookups, swappable in tests."""

    get_request: Callable[[Session, UUID], StockRequest | None] = get_request_by_id
    query_requests: Callable[..., list[StockRequest]] = query_requests
    get_product: Callable[[Session, UUID], Product | None] = get_product_by_id
    get_user: Callable[[Session, UUID], User | None] = get_user_by_id
    list_admins: Callable[[Session], list[User]] = list_admin_users
    now_utc: Callable[[], datetime] = rules.now_utc
    stock_out_limit: int | None = None

    def resolved_stock_out_limit(self) -> int:
        if self.stock_out_limit is not None:
            return self.stock_out_limit
        return settings.STAFF_STOCK_OUT_LIMIT


DEFAULT_REQUEST_HOOKS = RequestUseCaseHooks()


@dataclass
class RequestMutationOutcome:
    """Result of a mutation: the request (None once deleted) and what was fanned out."""

    request: StockRequest | None
    notifications: list[Notification] = field(default_factory=list)
    # Owner of the request when an admin acted on someone else's request.
    acted_on_owner: User | None = None


def _get_request_or_404(*, db: Session, request_id: UUID, hooks: RequestUseCaseHooks) -> StockRequest:
    request = hooks.get_request(db, request_id)
    if not request:
        raise NotFoundError(
            code="REQUEST_NOT_FOUND",
            message="Request not found",
        )
    return request


def _fan_out(db: Session, build_drafts: Callable[[], list]) -> list[Notification]:
    """Best-effort delivery; lookup failures are logged like write failures."""
    try:
        drafts = build_drafts()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to prepare request notifications")
        return []
    return deliver_notifications(db, drafts)


def _lookup_owner(db: Session, *, request: StockRequest, hooks: RequestUseCaseHooks) -> User | None:
    """Owner lookup after the request commit; a failure only drops the notice."""
    try:
        return hooks.get_user(db, request.user_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to load owner of request %s", request.id)
        return None


def list_requests_use_case(
    *,
    db: Session,
    current_user: User,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> list[StockRequest]:
    """Admins see every request, staff only their own; newest first."""
    owner_id = policy.visible_owner_scope(actor_id=current_user.id, actor_role=current_user.role)
    return hooks.query_requests(db, owner_id=owner_id)


def get_request_use_case(
    *,
    db: Session,
    request_id: UUID,
    current_user: User,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> StockRequest:
    request = _get_request_or_404(db=db, request_id=request_id, hooks=hooks)
    policy.authorize_request_action(
        actor_id=current_user.id,
        actor_role=current_user.role,
        action=policy.VIEW,
        owner_id=request.user_id,
    )
    return request


def create_request_use_case(
    *,
    db: Session,
    data: StockRequestCreate,
    current_user: User,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> RequestMutationOutcome:
    """Validate against the current stock snapshot, persist, then notify admins."""
    policy.authorize_request_action(
        actor_id=current_user.id,
        actor_role=current_user.role,
        action=policy.CREATE,
    )
    rules.ensure_positive_amount(data.item_amount)
    rules.ensure_stock_out_limit(
        actor_role=current_user.role,
        transaction_type=data.transaction_type,
        item_amount=data.item_amount,
        limit=hooks.resolved_stock_out_limit(),
    )

    product = hooks.get_product(db, data.product_id)
    rules.ensure_product_available(product)
    rules.ensure_sufficient_stock(
        product=product,
        transaction_type=data.transaction_type,
        item_amount=data.item_amount,
    )

    request = StockRequest(
        id=uuid4(),
        user_id=current_user.id,
        product_id=product.id,
        transaction_type=data.transaction_type,
        item_amount=data.item_amount,
        transaction_date=data.transaction_date,
        status=rules.PENDING,
    )
    append_activity(request, action="created", actor=current_user, at=hooks.now_utc())
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(
        "request.created id=%s by=%s type=%s amount=%s",
        request.id,
        current_user.id,
        request.transaction_type,
        request.item_amount,
    )

    notifications: list[Notification] = []
    if current_user.role == policy.STAFF:
        notifications = _fan_out(
            db,
            lambda: request_created_drafts(
                request=request,
                creator=current_user,
                product=product,
                admins=hooks.list_admins(db),
            ),
        )
    return RequestMutationOutcome(request=request, notifications=notifications)


def update_request_use_case(
    *,
    db: Session,
    request_id: UUID,
    data: StockRequestUpdate,
    current_user: User,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> RequestMutationOutcome:
    """Edit a pending request; admins editing another user's request notify the owner."""
    request = _get_request_or_404(db=db, request_id=request_id, hooks=hooks)
    policy.authorize_request_action(
        actor_id=current_user.id,
        actor_role=current_user.role,
        action=policy.EDIT,
        owner_id=request.user_id,
    )
    rules.next_request_status(current_status=request.status, action=rules.EDIT)

    payload = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if key in _EDITABLE_FIELDS and value is not None
    }

    next_type = payload.get("transaction_type", request.transaction_type)
    next_amount = payload.get("item_amount", request.item_amount)
    rules.ensure_positive_amount(next_amount)
    rules.ensure_stock_out_limit(
        actor_role=current_user.role,
        transaction_type=next_type,
        item_amount=next_amount,
        limit=hooks.resolved_stock_out_limit(),
    )

    product: Product | None = None
    if "product_id" in payload and payload["product_id"] != request.product_id:
        product = hooks.get_product(db, payload["product_id"])
        rules.ensure_product_available(product)

    for key, value in payload.items():
        setattr(request, key, value)
    if current_user.id != request.user_id:
        request.last_modified_by_id = current_user.id

    append_activity(request, action="updated", actor=current_user, at=hooks.now_utc())
    db.commit()
    db.refresh(request)
    logger.info("request.updated id=%s by=%s fields=%s", request.id, current_user.id, sorted(payload))

    if not policy.is_admin(current_user.role) or request.user_id == current_user.id:
        return RequestMutationOutcome(request=request)

    owner = _lookup_owner(db, request=request, hooks=hooks)
    notifications = _fan_out(
        db,
        lambda: [
            request_updated_draft(
                request=request,
                actor=current_user,
                product=product or hooks.get_product(db, request.product_id),
            )
        ],
    )
    return RequestMutationOutcome(request=request, notifications=notifications, acted_on_owner=owner)


def cancel_request_use_case(
    *,
    db: Session,
    request_id: UUID,
    current_user: User,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> StockRequest:
    request = _get_request_or_404(db=db, request_id=request_id, hooks=hooks)
    policy.authorize_request_action(
        actor_id=current_user.id,
        actor_role=current_user.role,
        action=policy.CANCEL,
        owner_id=request.user_id,
    )
    request.status = rules.next_request_status(current_status=request.status, action=rules.CANCEL)
    append_activity(request, action="cancelled", actor=current_user, at=hooks.now_utc())
    db.commit()
    db.refresh(request)
    logger.info("request.cancelled id=%s by=%s", request.id, current_user.id)
    return request


def approve_request_use_case(
    *,
    db: Session,
    request_id: UUID,
    current_user: User,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> StockRequest:
    """Approve a pending request. Product stock is left untouched."""
    request = _get_request_or_404(db=db, request_id=request_id, hooks=hooks)
    policy.authorize_request_action(
        actor_id=current_user.id,
        actor_role=current_user.role,
        action=policy.APPROVE,
        owner_id=request.user_id,
    )
    new_status = rules.next_request_status(current_status=request.status, action=rules.APPROVE)

    now = hooks.now_utc()
    request.status = new_status
    request.approved_by_id = current_user.id
    request.approved_at = now
    append_activity(request, action="approved", actor=current_user, at=now)
    db.commit()
    db.refresh(request)
    logger.info("request.approved id=%s by=%s", request.id, current_user.id)
    return request


def reject_request_use_case(
    *,
    db: Session,
    request_id: UUID,
    current_user: User,
    rejection_reason: str | None,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> StockRequest:
    # Reason is checked first so a missing reason fails the same way for every caller.
    reason = rules.require_rejection_reason(rejection_reason)

    request = _get_request_or_404(db=db, request_id=request_id, hooks=hooks)
    policy.authorize_request_action(
        actor_id=current_user.id,
        actor_role=current_user.role,
        action=policy.REJECT,
        owner_id=request.user_id,
    )
    new_status = rules.next_request_status(current_status=request.status, action=rules.REJECT)

    now = hooks.now_utc()
    request.status = new_status
    request.rejection_reason = reason
    request.approved_by_id = current_user.id
    request.approved_at = now
    append_activity(request, action="rejected", actor=current_user, at=now, details=reason)
    db.commit()
    db.refresh(request)
    logger.info("request.rejected id=%s by=%s", request.id, current_user.id)
    return request


def delete_request_use_case(
    *,
    db: Session,
    request_id: UUID,
    current_user: User,
    hooks: RequestUseCaseHooks = DEFAULT_REQUEST_HOOKS,
) -> RequestMutationOutcome:
    """Delete a request; an admin removing a staff member's request notifies them."""
    request = _get_request_or_404(db=db, request_id=request_id, hooks=hooks)
    policy.authorize_request_action(
        actor_id=current_user.id,
        actor_role=current_user.role,
        action=policy.DELETE,
        owner_id=request.user_id,
    )

    owner = hooks.get_user(db, request.user_id)
    notify_owner = (
        policy.is_admin(current_user.role)
        and owner is not None
        and owner.role == policy.STAFF
    )
    # Snapshot the message while the request and its product are still loadable.
    draft = None
    if notify_owner:
        draft = request_deleted_draft(
            request=request,
            actor=current_user,
            product=hooks.get_product(db, request.product_id),
        )

    deleted_id = request.id
    db.delete(request)
    db.commit()
    logger.info("request.deleted id=%s by=%s", deleted_id, current_user.id)

    if draft is None:
        return RequestMutationOutcome(request=None)

    notifications = deliver_notifications(db, [draft])
    return RequestMutationOutcome(request=None, notifications=notifications, acted_on_owner=owner)
