"""Consent gate in front of every submission."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cip.client.devices import LocationSensor, Position
from cip.errors import ConsentStateError, SubmissionValidationError
from cip.utils.logging import get_logger
from cip.utils.text import is_blank


logger = get_logger(__name__)

DEFAULT_LOCATION_TIMEOUT_SECONDS = 10.0

DISCLOSED_METADATA: tuple[str, ...] = (
    "Location (precise from your device, or approximate from your network)",
    "Device info (browser, platform, screen resolution)",
    "Timezone",
    "Language preferences",
    "Network address",
)


class ConsentState(str, Enum):
    IDLE = "idle"
    DISCLOSING = "disclosing"
    PRECISE_REQUESTED = "precise_requested"
    APPROXIMATE_REQUESTED = "approximate_requested"
    CANCELLED = "cancelled"


class ConsentMode(str, Enum):
    PRECISE = "precise"
    APPROXIMATE = "approximate"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ConsentDecision:
    """Outcome of one consent round; never persisted."""

    mode: ConsentMode

    @property
    def attempt_precise(self) -> bool:
        return self.mode is ConsentMode.PRECISE

    @property
    def cancelled(self) -> bool:
        return self.mode is ConsentMode.CANCELLED


_CHOICE_STATES = {
    ConsentState.PRECISE_REQUESTED: ConsentMode.PRECISE,
    ConsentState.APPROXIMATE_REQUESTED: ConsentMode.APPROXIMATE,
    ConsentState.CANCELLED: ConsentMode.CANCELLED,
}


class ConsentGate:
    """idle -> disclosing -> {precise, approximate, cancelled} -> resolved (idle)."""

    def __init__(self) -> None:
        self.state = ConsentState.IDLE

    def open(self, message: Optional[str]) -> tuple[str, ...]:
        """Intercept a submit attempt and return the disclosure list."""
        if self.state is not ConsentState.IDLE:
            raise ConsentStateError(f"cannot open consent from {self.state.value}")
        if is_blank(message):
            raise SubmissionValidationError("Message is required")
        self.state = ConsentState.DISCLOSING
        return DISCLOSED_METADATA

    def choose_precise(self) -> None:
        self._choose(ConsentState.PRECISE_REQUESTED)

    def choose_approximate(self) -> None:
        self._choose(ConsentState.APPROXIMATE_REQUESTED)

    def cancel(self) -> None:
        self._choose(ConsentState.CANCELLED)

    def resolve(self) -> ConsentDecision:
        """Hand the decision over and tear the gate down."""
        mode = _CHOICE_STATES.get(self.state)
        if mode is None:
            raise ConsentStateError(f"nothing to resolve in {self.state.value}")
        self.state = ConsentState.IDLE
        logger.info("consent.resolved mode=%s", mode.value)
        return ConsentDecision(mode=mode)

    def _choose(self, target: ConsentState) -> None:
        if self.state is not ConsentState.DISCLOSING:
            raise ConsentStateError(f"cannot choose {target.value} from {self.state.value}")
        self.state = target


def request_position(
    sensor: Optional[LocationSensor],
    timeout: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
) -> Optional[Position]:
    """Ask the device for a high-accuracy fix. Any failure resolves to None."""
    if sensor is None:
        return None
    try:
        return sensor.current_position(timeout=timeout, high_accuracy=True)
    except Exception as exc:
        logger.info("consent.location_unavailable error=%s", exc)
        return None
