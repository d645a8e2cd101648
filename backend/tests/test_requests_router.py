from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from stockroom.auth import get_current_user
from stockroom.database import get_db
from stockroom.domain_errors import ForbiddenError
from stockroom.main import app
from stockroom.routers import requests as requests_router
from stockroom.use_cases.request_lifecycle import RequestMutationOutcome


@pytest.fixture
def client_as():
    def _client(user):
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_db] = lambda: SimpleNamespace()
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


def test_action_notice_is_absent_when_actor_owns_request() -> None:
    outcome = RequestMutationOutcome(request=None)
    user = SimpleNamespace(name="Sam Staff", role="staff")

    assert requests_router._action_notice(outcome=outcome, action="deleted", current_user=user) is None


def test_admin_delete_of_staff_request_returns_owner_notice(client_as, monkeypatch) -> None:
    admin = SimpleNamespace(id=uuid4(), name="Ada Admin", role="admin")
    owner = SimpleNamespace(id=uuid4(), name="Sam Staff", role="staff")
    monkeypatch.setattr(
        requests_router,
        "delete_request_use_case",
        lambda **_kwargs: RequestMutationOutcome(request=None, acted_on_owner=owner),
    )

    response = client_as(admin).delete(f"/api/v1/requests/{uuid4()}")

    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Admin (Ada Admin) deleted request from Sam Staff"
    assert payload["notification"]["action"] == "deleted"
    assert payload["notification"]["performed_by_role"] == "admin"


def test_own_delete_returns_plain_message(client_as, monkeypatch) -> None:
    staff = SimpleNamespace(id=uuid4(), name="Sam Staff", role="staff")
    monkeypatch.setattr(
        requests_router,
        "delete_request_use_case",
        lambda **_kwargs: RequestMutationOutcome(request=None),
    )

    response = client_as(staff).delete(f"/api/v1/requests/{uuid4()}")

    assert response.status_code == 200
    assert response.json() == {"message": "Request deleted successfully", "notification": None}


def test_domain_errors_are_rendered_as_problem_details(client_as, monkeypatch) -> None:
    staff = SimpleNamespace(id=uuid4(), name="Sam Staff", role="staff")

    def _forbidden(**_kwargs):
        raise ForbiddenError(code="REQUEST_APPROVE_FORBIDDEN", message="Only admin can approve requests")

    monkeypatch.setattr(requests_router, "approve_request_use_case", _forbidden)

    response = client_as(staff).post(f"/api/v1/requests/{uuid4()}/approve")

    assert response.status_code == 403
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "REQUEST_APPROVE_FORBIDDEN"


def test_health_endpoint() -> None:
    response = TestClient(app).get("/api/v1/system/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
