from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from stockroom.config import settings
from stockroom.domain_errors import DomainError, ForbiddenError, InvalidStateError
from stockroom.problem_details import (
    build_problem_details_response,
    domain_error_handler,
    problem_payload,
    problem_type_url,
)


def test_problem_details_payload_contains_stable_code_and_rfc7807_fields() -> None:
    response = build_problem_details_response(
        InvalidStateError(
            code="REQUEST_INVALID_STATUS_FOR_APPROVE",
            message="Only pending requests can be approved",
            details={"status": "approved"},
        )
    )

    assert response.status_code == 409
    assert response.media_type == "application/problem+json"

    body = response.body.decode("utf-8")
    assert '"type":"https://api.stockroom.local/problems/request_invalid_status_for_approve"' in body
    assert '"title":"Conflict"' in body
    assert '"status":409' in body
    assert '"detail":"Only pending requests can be approved"' in body
    assert '"details":{"status":"approved"}' in body


def test_problem_details_omits_details_when_none() -> None:
    response = build_problem_details_response(
        ForbiddenError(code="REQUEST_APPROVE_FORBIDDEN", message="Only admin can approve requests")
    )

    body = response.body.decode("utf-8")
    assert response.status_code == 403
    assert '"code":"REQUEST_APPROVE_FORBIDDEN"' in body
    assert '"details"' not in body


def test_fastapi_exception_handler_maps_domain_error_to_problem_details() -> None:
    app = FastAPI()
    app.add_exception_handler(DomainError, domain_error_handler)

    @app.get("/boom")
    def _boom():
        raise DomainError(
            code="ROUTE_PROBLEM",
            http_status=400,
            message="route failed",
            details={"source": "test"},
        )

    client = TestClient(app)
    response = client.get("/boom")

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("application/problem+json")
    payload = response.json()
    assert payload["code"] == "ROUTE_PROBLEM"
    assert payload["detail"] == "route failed"
    assert payload["title"] == "Bad Request"
    assert payload["instance"] == "/boom"
    assert payload["details"] == {"source": "test"}


def test_problem_type_url_uses_configured_base(monkeypatch) -> None:
    monkeypatch.setattr(settings, "PROBLEM_TYPE_BASE_URL", "https://errors.example.test/p/")

    assert problem_type_url("INSUFFICIENT_STOCK") == "https://errors.example.test/p/insufficient_stock"


def test_problem_payload_falls_back_for_non_standard_status() -> None:
    payload = problem_payload(
        DomainError(code="ODD_STATUS", http_status=499, message="odd"),
        instance="/api/v1/requests",
    )

    assert payload["title"] == "Domain Error"
    assert payload["instance"] == "/api/v1/requests"
    assert "details" not in payload
