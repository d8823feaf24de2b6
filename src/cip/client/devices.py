"""Platform capability protocols used by the capture flow.

Concrete implementations wrap whatever the host platform offers (a browser
bridge, a desktop audio library, a test double). Acquisition methods raise
``cip.errors.PermissionDenied`` when the user refuses access.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol


class AudioHandle(Protocol):
    def start(self) -> None:
        """Begin capturing audio."""

    def stop(self) -> bytes:
        """Stop capturing and return the encoded recording."""

    def release(self) -> None:
        """Release the underlying device."""


class Microphone(Protocol):
    def acquire(self) -> AudioHandle:
        """Open the audio-input device."""


class PixelSurface(Protocol):
    def to_blob(self, mime_type: str, quality: float) -> Optional[bytes]:
        """Encode the surface as a binary image, or None if the read is blocked."""

    def to_data_url(self, mime_type: str, quality: float) -> Optional[str]:
        """Materialize the surface as a data URL string."""


class CameraHandle(Protocol):
    def take_photo(self) -> Optional[bytes]:
        """Dedicated still-image primitive; may be unsupported and raise."""

    def read_frame(self) -> Optional[PixelSurface]:
        """Draw the current video frame onto an off-screen surface."""

    def release(self) -> None:
        """Release the underlying device."""


class Camera(Protocol):
    def acquire(self) -> CameraHandle:
        """Open the video-input device (front-facing, 640x480)."""


@dataclass(frozen=True)
class Position:
    """Device-reported coordinates."""

    lat: float
    lng: float
    accuracy: Optional[float] = None


class LocationSensor(Protocol):
    def current_position(self, timeout: float, high_accuracy: bool) -> Position:
        """Return the current position.

        Raises PermissionDenied, TimeoutError or another exception when no fix
        is available.
        """


class Ticker(Protocol):
    def start(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once per interval until cancelled."""

    def cancel(self) -> None:
        """Stop ticking. Safe to call more than once."""


class IntervalTicker:
    """Repeating timer built on ``threading.Timer``."""

    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._timer: Optional[threading.Timer] = None
        self._callback: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()

    def start(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._callback = callback
            self._schedule()

    def cancel(self) -> None:
        with self._lock:
            self._callback = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _schedule(self) -> None:
        timer = threading.Timer(self.interval, self._fire)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self) -> None:
        with self._lock:
            callback = self._callback
            if callback is None:
                return
            self._schedule()
        callback()
