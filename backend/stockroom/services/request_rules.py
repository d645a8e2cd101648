"""Stock request state machine and inventory invariant helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone

from ..domain_errors import DomainValidationError, InvalidStateError

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
CANCELLED = "cancelled"

STOCK_IN = "stockIn"
STOCK_OUT = "stockOut"

APPROVE = "approve"
REJECT = "reject"
CANCEL = "cancel"
EDIT = "edit"

_TERMINAL_STATUSES: set[str] = {APPROVED, REJECTED, CANCELLED}
_ALLOWED_TRANSITIONS: dict[str, dict[str, str]] = {
    PENDING: {APPROVE: APPROVED, REJECT: REJECTED, CANCEL: CANCELLED, EDIT: PENDING},
    APPROVED: {},
    REJECTED: {},
    CANCELLED: {},
}
# Past-tense wording used in error messages and activity entries.
_ACTION_PAST_TENSE: dict[str, str] = {
    APPROVE: "approved",
    REJECT: "rejected",
    CANCEL: "cancelled",
    EDIT: "updated",
}
_TRANSACTION_TYPE_LABELS: dict[str, str] = {
    STOCK_IN: "Stock In",
    STOCK_OUT: "Stock Out",
}


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_request_status(status: str | None) -> str:
    if not status:
        return PENDING
    return status.strip().lower()


def is_terminal_status(status: str | None) -> bool:
    return normalize_request_status(status) in _TERMINAL_STATUSES


def action_past_tense(action: str) -> str:
    return _ACTION_PAST_TENSE[action]


def next_request_status(*, current_status: str | None, action: str) -> str:
    """Return the status reached by ``action`` or raise InvalidStateError."""
    if action not in _ACTION_PAST_TENSE:
        raise ValueError(f"Unknown request action: {action}")

    current = normalize_request_status(current_status)
    allowed = _ALLOWED_TRANSITIONS.get(current, {})
    if action not in allowed:
        raise InvalidStateError(
            code=f"REQUEST_INVALID_STATUS_FOR_{action.upper()}",
            message=f"Only pending requests can be {_ACTION_PAST_TENSE[action]}",
            details={"status": current},
        )
    return allowed[action]


def ensure_positive_amount(item_amount: int | None) -> None:
    if item_amount is None or item_amount <= 0:
        raise DomainValidationError(
            code="REQUEST_INVALID_AMOUNT",
            message="Item amount must be greater than zero",
        )


def ensure_stock_out_limit(
    *,
    actor_role: str,
    transaction_type: str,
    item_amount: int,
    limit: int,
) -> None:
    """Staff stock-out requests are capped; admins have no ceiling."""
    if actor_role == "staff" and transaction_type == STOCK_OUT and item_amount > limit:
        raise DomainValidationError(
            code="STOCK_OUT_LIMIT_EXCEEDED",
            message=f"Stock-out amount cannot exceed {limit} items",
            details={"limit": limit, "item_amount": item_amount},
        )


def ensure_product_available(product) -> None:
    if product is None or not product.is_active:
        raise DomainValidationError(
            code="PRODUCT_UNAVAILABLE",
            message="Product not found or inactive",
        )


def ensure_sufficient_stock(*, product, transaction_type: str, item_amount: int) -> None:
    """Check a stock-out against the current snapshot; nothing is reserved or deducted."""
    if transaction_type == STOCK_OUT and product.stock_quantity < item_amount:
        raise DomainValidationError(
            code="INSUFFICIENT_STOCK",
            message="Insufficient stock available",
            details={"available": product.stock_quantity, "requested": item_amount},
        )


def require_rejection_reason(reason: str | None) -> str:
    cleaned = (reason or "").strip()
    if not cleaned:
        raise DomainValidationError(
            code="REJECTION_REASON_REQUIRED",
            message="Rejection reason is required",
        )
    return cleaned


def transaction_type_label(transaction_type: str | None) -> str:
    return _TRANSACTION_TYPE_LABELS.get(transaction_type or "", "Stock Out")


def format_request_date(value: date | datetime | None) -> str:
    """Render a transaction date as M/D/YYYY."""
    if value is None:
        return "unknown date"
    return f"{value.month}/{value.day}/{value.year}"
