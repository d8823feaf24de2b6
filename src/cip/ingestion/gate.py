"""Validation gate for inbound submission payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from cip.models import SubmissionPayload
from cip.utils.text import is_blank


@dataclass(frozen=True)
class AcceptDecision:
    """Payload passed validation."""

    payload: SubmissionPayload
    reason: str = "accepted"


@dataclass(frozen=True)
class RejectDecision:
    """Payload rejected before any side effect."""

    reason: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


def evaluate(raw: Any) -> AcceptDecision | RejectDecision:
    """Parse and validate a raw JSON body."""
    if not isinstance(raw, dict):
        return RejectDecision(reason="invalid_body", message="Request body must be a JSON object")

    try:
        payload = SubmissionPayload.model_validate(raw)
    except ValidationError as exc:
        return RejectDecision(
            reason="invalid_payload",
            message=_first_error_message(exc),
            details={"errors": exc.error_count()},
        )

    if is_blank(payload.message):
        return RejectDecision(reason="empty_message", message="Message is required")

    return AcceptDecision(payload=payload.model_copy(update={"message": payload.message.strip()}))


def _first_error_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid submission"
    first = errors[0]
    location: Optional[str] = ".".join(str(part) for part in first.get("loc", ())) or None
    if location == "message":
        return "Message is required"
    if location:
        return f"Invalid field: {location}"
    return "Invalid submission"
