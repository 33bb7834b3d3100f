"""Structured stage timeline events for job lifecycle diagnostics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    job_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured timeline event payload.

    Args:
        stage: Lifecycle stage name (`validate`, `submit`, `poll`, `fetch`, `clear`).
        status: Stage status marker.
        job_id: Job identifier when one exists for the stage.
        details: Optional structured details object.

    Returns:
        dict[str, object]: Structured timeline event.

    Raises:
        ValueError: Raised when stage or status is blank.
    """

    if not stage.strip():
        raise ValueError("stage must not be blank")
    if not status.strip():
        raise ValueError("status must not be blank")

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if job_id is not None:
        event_payload["job_id"] = job_id
    if details:
        event_payload["details"] = dict(details)
    return event_payload
