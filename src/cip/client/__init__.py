"""Client-side capture, consent and submission flow."""

from cip.client.capture import AudioRecorder, CaptureArtifact, SelfieCapture
from cip.client.consent import ConsentDecision, ConsentGate, ConsentMode
from cip.client.orchestrator import (
    ContactForm,
    SubmissionCancelled,
    SubmissionFailure,
    SubmissionOrchestrator,
    SubmissionSuccess,
)

__all__ = [
    "AudioRecorder",
    "CaptureArtifact",
    "SelfieCapture",
    "ConsentDecision",
    "ConsentGate",
    "ConsentMode",
    "ContactForm",
    "SubmissionCancelled",
    "SubmissionFailure",
    "SubmissionOrchestrator",
    "SubmissionSuccess",
]
