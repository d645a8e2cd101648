from __future__ import annotations

from uuid import uuid4

import pytest

from stockroom.domain_errors import DomainError
from stockroom.services.request_policy import (
    authorize_request_action,
    can_perform_request_action,
    visible_owner_scope,
)

OWNER_ID = uuid4()
OTHER_ID = uuid4()


@pytest.mark.parametrize(
    ("action", "admin_on_other", "staff_on_own", "staff_on_other"),
    [
        ("view", True, True, False),
        ("create", True, True, True),
        ("edit", True, True, False),
        ("cancel", True, True, False),
        ("approve", True, False, False),
        ("reject", True, False, False),
        ("delete", True, True, False),
    ],
)
def test_request_policy_matrix(action, admin_on_other, staff_on_own, staff_on_other) -> None:
    assert can_perform_request_action(
        actor_id=OTHER_ID, actor_role="admin", action=action, owner_id=OWNER_ID
    ) is admin_on_other
    assert can_perform_request_action(
        actor_id=OWNER_ID, actor_role="staff", action=action, owner_id=OWNER_ID
    ) is staff_on_own
    assert can_perform_request_action(
        actor_id=OTHER_ID, actor_role="staff", action=action, owner_id=OWNER_ID
    ) is staff_on_other


def test_unknown_role_is_denied_everything() -> None:
    assert can_perform_request_action(actor_id=OWNER_ID, actor_role="auditor", action="view", owner_id=OWNER_ID) is False
    assert can_perform_request_action(actor_id=OWNER_ID, actor_role=None, action="create") is False


def test_unknown_action_is_a_programming_error() -> None:
    with pytest.raises(ValueError):
        can_perform_request_action(actor_id=OWNER_ID, actor_role="admin", action="archive")


def test_authorize_raises_forbidden_with_action_specific_code() -> None:
    with pytest.raises(DomainError) as exc_info:
        authorize_request_action(actor_id=OWNER_ID, actor_role="staff", action="reject", owner_id=OWNER_ID)

    assert exc_info.value.http_status == 403
    assert exc_info.value.code == "REQUEST_REJECT_FORBIDDEN"
    assert exc_info.value.message == "Only admin can reject requests"


def test_visible_owner_scope() -> None:
    assert visible_owner_scope(actor_id=OWNER_ID, actor_role="admin") is None
    assert visible_owner_scope(actor_id=OWNER_ID, actor_role="staff") == OWNER_ID
