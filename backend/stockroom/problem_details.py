"""Problem Details (RFC 7807) rendering for domain errors raised by use cases."""
from __future__ import annotations

from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from .config import settings
from .domain_errors import DomainError

PROBLEM_MEDIA_TYPE = "application/problem+json"


def problem_type_url(code: str) -> str:
    return f"{settings.PROBLEM_TYPE_BASE_URL.rstrip('/')}/{code.lower()}"


def _status_title(http_status: int) -> str:
    try:
        return HTTPStatus(http_status).phrase
    except ValueError:
        return "Domain Error"


def problem_payload(exc: DomainError, *, instance: str | None = None) -> dict[str, Any]:
    """Build the problem body; ``code`` and ``details`` are extension members."""
    payload: dict[str, Any] = {
        "type": problem_type_url(exc.code),
        "title": _status_title(exc.http_status),
        "status": exc.http_status,
        "detail": exc.message,
        "code": exc.code,
    }
    if instance:
        payload["instance"] = instance
    if exc.details is not None:
        payload["details"] = exc.details
    return payload


def build_problem_details_response(exc: DomainError, *, instance: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=problem_payload(exc, instance=instance),
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Exception handler registered on the app for every DomainError."""
    return build_problem_details_response(exc, instance=request.url.path)
