"""Voice note and selfie capture with graceful degradation."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from cip.client.devices import (
    AudioHandle,
    Camera,
    CameraHandle,
    IntervalTicker,
    Microphone,
    Ticker,
)
from cip.errors import CaptureFailure, PermissionDenied
from cip.models import MAX_AUDIO_SECONDS
from cip.utils.logging import get_logger
from cip.utils.text import decode_base64_payload, to_data_url


logger = get_logger(__name__)

AUDIO_MIME_TYPE = "audio/webm"
IMAGE_MIME_TYPE = "image/jpeg"
IMAGE_QUALITY = 0.7
MIN_BLOB_BYTES = 1000
MIN_DATA_URL_CHARS = 100
SELFIE_COUNTDOWN_SECONDS = 3


@dataclass(frozen=True)
class CaptureArtifact:
    """In-memory media blob owned by the capture flow until submission."""

    data: bytes
    mime_type: str
    duration: Optional[int] = None

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    RECORDED = "recorded"
    DISABLED = "disabled"


class AudioRecorder:
    """Bounded-duration voice note recorder.

    The ticker advances ``elapsed`` once per second; reaching ``max_seconds``
    finalizes the recording without user action. A finished recording must
    be cleared before a new one can start.
    """

    def __init__(
        self,
        microphone: Microphone,
        ticker: Optional[Ticker] = None,
        max_seconds: int = MAX_AUDIO_SECONDS,
        on_complete: Optional[Callable[[CaptureArtifact], None]] = None,
    ) -> None:
        self.microphone = microphone
        self.ticker = ticker or IntervalTicker()
        self.max_seconds = max_seconds
        self.on_complete = on_complete
        self.state = RecorderState.IDLE
        self.elapsed = 0
        self.artifact: Optional[CaptureArtifact] = None
        self._handle: Optional[AudioHandle] = None
        self._lock = threading.RLock()

    @property
    def disabled(self) -> bool:
        return self.state is RecorderState.DISABLED

    def start_recording(self) -> bool:
        """Acquire the microphone and start. Returns False when not started."""
        with self._lock:
            if self.state is not RecorderState.IDLE:
                return False

            try:
                handle = self.microphone.acquire()
            except PermissionDenied as exc:
                logger.info("capture.audio.permission_denied error=%s", exc)
                self.state = RecorderState.DISABLED
                return False

            try:
                handle.start()
            except Exception:
                handle.release()
                raise

            self._handle = handle
            self.elapsed = 0
            self.state = RecorderState.RECORDING
            self.ticker.start(self._tick)
            return True

    def stop_recording(self) -> Optional[CaptureArtifact]:
        """Finalize the recording and release the microphone."""
        with self._lock:
            if self.state is not RecorderState.RECORDING:
                return self.artifact
            return self._finalize()

    def clear(self) -> None:
        """Discard the recording and return to idle."""
        with self._lock:
            if self.state is RecorderState.RECORDING:
                self._abort()
            if self.state is RecorderState.DISABLED:
                return
            self.artifact = None
            self.elapsed = 0
            self.state = RecorderState.IDLE

    def close(self) -> None:
        """Teardown: cancel timers and release any held device."""
        with self._lock:
            if self.state is RecorderState.RECORDING:
                self._abort()
                self.state = RecorderState.IDLE
            self.ticker.cancel()

    def _tick(self) -> None:
        with self._lock:
            if self.state is not RecorderState.RECORDING:
                return
            self.elapsed += 1
            if self.elapsed >= self.max_seconds:
                logger.info("capture.audio.auto_stop seconds=%s", self.elapsed)
                self._finalize()

    def _finalize(self) -> CaptureArtifact:
        self.ticker.cancel()
        handle = self._handle
        self._handle = None
        try:
            data = handle.stop() if handle is not None else b""
        finally:
            if handle is not None:
                handle.release()

        artifact = CaptureArtifact(
            data=data,
            mime_type=AUDIO_MIME_TYPE,
            duration=min(self.elapsed, self.max_seconds),
        )
        self.artifact = artifact
        self.state = RecorderState.RECORDED
        if self.on_complete is not None:
            self.on_complete(artifact)
        return artifact

    def _abort(self) -> None:
        self.ticker.cancel()
        handle = self._handle
        self._handle = None
        if handle is None:
            return
        try:
            handle.stop()
        finally:
            handle.release()


CaptureStrategy = Callable[[CameraHandle], Optional[CaptureArtifact]]


def capture_still_image(handle: CameraHandle) -> Optional[CaptureArtifact]:
    """Dedicated single-frame primitive; bypasses canvas readback."""
    data = handle.take_photo()
    if not data:
        return None
    return CaptureArtifact(data=data, mime_type=IMAGE_MIME_TYPE)


def capture_surface_blob(handle: CameraHandle) -> Optional[CaptureArtifact]:
    """Off-screen surface encoded as a binary blob."""
    surface = handle.read_frame()
    if surface is None:
        return None
    blob = surface.to_blob(IMAGE_MIME_TYPE, IMAGE_QUALITY)
    if not blob or len(blob) <= MIN_BLOB_BYTES:
        return None
    return CaptureArtifact(data=blob, mime_type=IMAGE_MIME_TYPE)


def capture_surface_data_url(handle: CameraHandle) -> Optional[CaptureArtifact]:
    """Off-screen surface materialized as a data URL string."""
    surface = handle.read_frame()
    if surface is None:
        return None
    data_url = surface.to_data_url(IMAGE_MIME_TYPE, IMAGE_QUALITY)
    if not data_url or len(data_url) <= MIN_DATA_URL_CHARS or data_url.startswith("data:,"):
        return None
    return CaptureArtifact(data=decode_base64_payload(data_url), mime_type=IMAGE_MIME_TYPE)


DEFAULT_STRATEGIES: tuple[tuple[str, CaptureStrategy], ...] = (
    ("still_image", capture_still_image),
    ("surface_blob", capture_surface_blob),
    ("surface_data_url", capture_surface_data_url),
)


def run_capture_chain(
    handle: CameraHandle,
    strategies: Sequence[tuple[str, CaptureStrategy]] = DEFAULT_STRATEGIES,
) -> CaptureArtifact:
    """Take the first strategy that yields an image, or raise CaptureFailure."""
    attempted: list[str] = []
    for name, strategy in strategies:
        attempted.append(name)
        try:
            artifact = strategy(handle)
        except Exception as exc:
            logger.debug("capture.image.strategy_failed strategy=%s error=%s", name, exc)
            continue
        if artifact is not None:
            logger.info("capture.image.ok strategy=%s bytes=%s", name, len(artifact.data))
            return artifact
    raise CaptureFailure(attempted)


class CameraState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    COUNTDOWN = "countdown"
    CAPTURED = "captured"
    DISABLED = "disabled"


class SelfieCapture:
    """Live selfie capture with countdown and fallback chain."""

    def __init__(
        self,
        camera: Camera,
        ticker: Optional[Ticker] = None,
        countdown_seconds: int = SELFIE_COUNTDOWN_SECONDS,
        strategies: Sequence[tuple[str, CaptureStrategy]] = DEFAULT_STRATEGIES,
        on_capture: Optional[Callable[[Optional[CaptureArtifact]], None]] = None,
    ) -> None:
        self.camera = camera
        self.ticker = ticker or IntervalTicker()
        self.countdown_seconds = countdown_seconds
        self.strategies = tuple(strategies)
        self.on_capture = on_capture
        self.state = CameraState.CLOSED
        self.countdown: Optional[int] = None
        self.artifact: Optional[CaptureArtifact] = None
        self.error: Optional[str] = None
        self._handle: Optional[CameraHandle] = None
        self._lock = threading.RLock()

    @property
    def disabled(self) -> bool:
        return self.state is CameraState.DISABLED

    def open_camera(self) -> bool:
        """Acquire the camera. Returns False when denied or already open."""
        with self._lock:
            if self.state not in (CameraState.CLOSED, CameraState.CAPTURED):
                return False
            self.error = None
            try:
                self._handle = self.camera.acquire()
            except PermissionDenied as exc:
                logger.info("capture.camera.permission_denied error=%s", exc)
                self.state = CameraState.DISABLED
                return False
            self.state = CameraState.OPEN
            return True

    def take_selfie(self) -> bool:
        """Start the countdown; the capture runs when it reaches zero."""
        with self._lock:
            if self.state is not CameraState.OPEN:
                return False
            self.countdown = self.countdown_seconds
            self.state = CameraState.COUNTDOWN
            if self.countdown <= 0:
                self._capture_after_countdown()
            else:
                self.ticker.start(self._tick)
            return True

    def capture(self) -> CaptureArtifact:
        """Run the fallback chain against the open camera."""
        with self._lock:
            if self._handle is None:
                raise CaptureFailure([], "Camera is not open")
            try:
                artifact = run_capture_chain(self._handle, self.strategies)
            except CaptureFailure as exc:
                self.error = str(exc)
                self.state = CameraState.OPEN
                raise

            self._release()
            self.artifact = artifact
            self.error = None
            self.state = CameraState.CAPTURED
            if self.on_capture is not None:
                self.on_capture(artifact)
            return artifact

    def cancel(self) -> None:
        """Abort a countdown and close the camera."""
        with self._lock:
            self.ticker.cancel()
            self.countdown = None
            self._release()
            if self.state in (CameraState.OPEN, CameraState.COUNTDOWN):
                self.state = CameraState.CLOSED

    def retake(self) -> bool:
        """Discard the selfie and reopen the camera."""
        with self._lock:
            self._discard()
            return self.open_camera()

    def clear(self) -> None:
        """Discard the selfie."""
        with self._lock:
            self._discard()

    def close(self) -> None:
        """Teardown: cancel timers and release the camera."""
        self.cancel()

    def _discard(self) -> None:
        self.artifact = None
        self.error = None
        if self.state is CameraState.CAPTURED:
            self.state = CameraState.CLOSED
        if self.on_capture is not None:
            self.on_capture(None)

    def _tick(self) -> None:
        with self._lock:
            if self.state is not CameraState.COUNTDOWN or self.countdown is None:
                return
            self.countdown -= 1
            if self.countdown <= 0:
                self._capture_after_countdown()

    def _capture_after_countdown(self) -> None:
        self.ticker.cancel()
        self.countdown = None
        try:
            self.capture()
        except CaptureFailure as exc:
            logger.warning("capture.image.failed attempted=%s", ",".join(exc.attempted))

    def _release(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.release()
