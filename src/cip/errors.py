"""Error taxonomy for the contact pipeline."""

from __future__ import annotations

from typing import Sequence


class ContactPipelineError(Exception):
    """Base class for pipeline errors."""


class SubmissionValidationError(ContactPipelineError):
    """Payload rejected before any side effect."""


class PermissionDenied(ContactPipelineError):
    """Microphone, camera or location access was refused."""


class CaptureFailure(ContactPipelineError):
    """Every image capture strategy came back empty."""

    GUIDANCE = (
        "Could not capture image. If your browser blocks canvas reads "
        "(fingerprinting protection), allow it for this site and try again."
    )

    def __init__(self, attempted: Sequence[str], message: str = GUIDANCE) -> None:
        super().__init__(message)
        self.attempted = list(attempted)


class EnrichmentFailure(ContactPipelineError):
    """A best-effort geolocation or storage call failed."""


class PersistenceFailure(ContactPipelineError):
    """The submission record could not be written."""


class ConsentStateError(ContactPipelineError):
    """Consent gate asked to make a transition it does not allow."""
