"""Authorization policy for stock request actions.

Every role/ownership rule for requests lives here so the rule set can be
enumerated and tested without a database. The functions are pure: they look at
the actor's id and role and the owner of the target request, nothing else.

=========  ==========================  ==================
action     admin                       staff
=========  ==========================  ==================
view       any request                 own requests
create     yes                         yes
edit       any request                 own requests
cancel     any request                 own requests
approve    yes                         no
reject     yes                         no
delete     any request                 own requests
=========  ==========================  ==================
"""

from __future__ import annotations

from uuid import UUID

from ..domain_errors import ForbiddenError

ADMIN = "admin"
STAFF = "staff"
KNOWN_ROLES: frozenset[str] = frozenset({ADMIN, STAFF})

VIEW = "view"
CREATE = "create"
EDIT = "edit"
CANCEL = "cancel"
APPROVE = "approve"
REJECT = "reject"
DELETE = "delete"

_OWNER_SCOPED_ACTIONS: frozenset[str] = frozenset({VIEW, EDIT, CANCEL, DELETE})
_ADMIN_ONLY_ACTIONS: frozenset[str] = frozenset({APPROVE, REJECT})
REQUEST_ACTIONS: frozenset[str] = _OWNER_SCOPED_ACTIONS | _ADMIN_ONLY_ACTIONS | {CREATE}

_DENIAL_MESSAGES: dict[str, str] = {
    VIEW: "Not authorized to view this request",
    CREATE: "Not authorized to create requests",
    EDIT: "Not authorized to edit this request",
    CANCEL: "Not authorized to cancel this request",
    APPROVE: "Only admin can approve requests",
    REJECT: "Only admin can reject requests",
    DELETE: "Not authorized to delete this request",
}


def is_admin(role: str | None) -> bool:
    return role == ADMIN


def can_perform_request_action(
    *,
    actor_id: UUID,
    actor_role: str | None,
    action: str,
    owner_id: UUID | None = None,
) -> bool:
    if action not in REQUEST_ACTIONS:
        raise ValueError(f"Unknown request action: {action}")
    if actor_role not in KNOWN_ROLES:
        return False
    if action == CREATE:
        return True
    if action in _ADMIN_ONLY_ACTIONS:
        return is_admin(actor_role)
    if is_admin(actor_role):
        return True
    return owner_id is not None and owner_id == actor_id


def authorize_request_action(
    *,
    actor_id: UUID,
    actor_role: str | None,
    action: str,
    owner_id: UUID | None = None,
) -> None:
    """Raise ForbiddenError unless the actor may perform ``action``."""
    if not can_perform_request_action(
        actor_id=actor_id,
        actor_role=actor_role,
        action=action,
        owner_id=owner_id,
    ):
        raise ForbiddenError(
            code=f"REQUEST_{action.upper()}_FORBIDDEN",
            message=_DENIAL_MESSAGES[action],
        )


def visible_owner_scope(*, actor_id: UUID, actor_role: str | None) -> UUID | None:
    """Owner filter for request listings: None means every request."""
    if is_admin(actor_role):
        return None
    return actor_id
