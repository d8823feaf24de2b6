"""Submission orchestrator: assemble one payload and transmit it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from cip.client.capture import CaptureArtifact
from cip.client.consent import ConsentDecision, request_position
from cip.client.devices import LocationSensor, Position
from cip.client.signals import SignalsProvider, local_signals
from cip.config import Settings
from cip.models import LocationSummary, SubmissionAck
from cip.utils.logging import get_logger
from cip.utils.text import is_blank


logger = get_logger(__name__)

NETWORK_ERROR_MESSAGE = "Could not reach the server. Check your connection and try again."
SERVER_ERROR_MESSAGE = "Something went wrong on our side. Please try again."


@dataclass
class ContactForm:
    """Form contents. Kept intact on failure so the sender can retry."""

    message: str = ""
    audio: Optional[CaptureArtifact] = None
    image: Optional[CaptureArtifact] = None
    contact_email: Optional[str] = None
    contact_social: Optional[str] = None

    def discard_media(self) -> None:
        self.audio = None
        self.image = None


@dataclass(frozen=True)
class SubmissionSuccess:
    id: str
    location: LocationSummary


@dataclass(frozen=True)
class SubmissionFailure:
    error: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class SubmissionCancelled:
    pass


SubmissionOutcome = SubmissionSuccess | SubmissionFailure | SubmissionCancelled


class SubmissionOrchestrator:
    """Turn a form plus a consent decision into one POST to the contact endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        location_sensor: Optional[LocationSensor] = None,
        signals_provider: SignalsProvider = local_signals,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.location_sensor = location_sensor
        self.signals_provider = signals_provider
        self._client = client

    def submit(self, form: ContactForm, decision: ConsentDecision) -> SubmissionOutcome:
        if decision.cancelled:
            logger.info("submit.cancelled")
            return SubmissionCancelled()

        if is_blank(form.message):
            return SubmissionFailure(error="Message is required")

        position: Optional[Position] = None
        if decision.attempt_precise:
            position = request_position(
                self.location_sensor, timeout=self.settings.location_timeout_seconds
            )

        payload = self.build_payload(form, decision, position)
        outcome = self._transmit(payload)
        if isinstance(outcome, SubmissionSuccess):
            form.discard_media()
        return outcome

    def build_payload(
        self,
        form: ContactForm,
        decision: ConsentDecision,
        position: Optional[Position],
    ) -> dict[str, Any]:
        """Wire payload for one submission."""
        signals = self.signals_provider()
        audio_data = _encode(form.audio, "audio")
        return {
            "message": form.message.strip(),
            "audioData": audio_data,
            "audioDuration": form.audio.duration if form.audio and audio_data else None,
            "imageData": _encode(form.image, "image"),
            "contactEmail": form.contact_email or None,
            "contactSocial": form.contact_social or None,
            "locationPrecise": decision.attempt_precise,
            "locationCoords": (
                {"lat": position.lat, "lng": position.lng, "accuracy": position.accuracy}
                if position is not None
                else None
            ),
            "deviceInfo": signals.device_info.model_dump(by_alias=True),
            "timezone": signals.timezone,
            "timezoneOffset": signals.timezone_offset,
            "languages": list(signals.languages),
        }

    def _transmit(self, payload: dict[str, Any]) -> SubmissionOutcome:
        url = self.settings.contact_endpoint_url
        try:
            if self._client is None:
                with httpx.Client(timeout=self.settings.client_timeout_seconds) as client:
                    response = client.post(url, json=payload)
            else:
                response = self._client.post(url, json=payload)
        except httpx.RequestError as exc:
            logger.warning("submit.transport_failed url=%s error=%s", url, exc)
            return SubmissionFailure(error=NETWORK_ERROR_MESSAGE)

        return _to_outcome(response)


def _to_outcome(response: httpx.Response) -> SubmissionOutcome:
    try:
        body = response.json()
    except ValueError:
        body = None

    if response.status_code == 200 and isinstance(body, dict) and body.get("success"):
        try:
            ack = SubmissionAck.model_validate(body)
        except ValidationError as exc:
            logger.warning("submit.bad_ack error=%s", exc)
            return SubmissionFailure(error=SERVER_ERROR_MESSAGE, status_code=response.status_code)
        logger.info("submit.ok id=%s source=%s", ack.id, ack.location.source.value)
        return SubmissionSuccess(id=ack.id, location=ack.location)

    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, str) or not error:
        error = SERVER_ERROR_MESSAGE
    logger.warning("submit.failed status=%s", response.status_code)
    return SubmissionFailure(error=error, status_code=response.status_code)


def _encode(artifact: Optional[CaptureArtifact], kind: str) -> Optional[str]:
    if artifact is None or not artifact.data:
        return None
    try:
        return artifact.to_data_url()
    except Exception as exc:
        logger.warning("submit.encode_failed kind=%s error=%s", kind, exc)
        return None
