"""Append-only activity log for stock requests."""
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from ..models import RequestActivity


def append_activity(
    request,
    *,
    action: str,
    actor,
    at: datetime,
    details: str | None = None,
) -> RequestActivity:
    """Append one entry to the request's log and return it.

    Entries have no per-request ordinal; the log is ordered by ``performed_at``.
    """
    entry = RequestActivity(
        id=uuid4(),
        request_id=request.id,
        action=action,
        performed_by_id=actor.id,
        performed_at=at,
        details=details or f"{action.capitalize()} by {actor.role}",
    )
    request.activity_log.append(entry)
    return entry
