"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Entity id does not resolve."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=404, message=message, details=details)


class ForbiddenError(DomainError):
    """Caller lacks the role or ownership required by the policy."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=403, message=message, details=details)


class DomainValidationError(DomainError):
    """Malformed or rule-violating input."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=400, message=message, details=details)


class InvalidStateError(DomainError):
    """Transition attempted from a status that does not allow it."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=409, message=message, details=details)
