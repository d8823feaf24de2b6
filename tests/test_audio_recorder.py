import threading
import time

from cip.client.capture import AUDIO_MIME_TYPE, AudioRecorder, RecorderState
from cip.client.devices import IntervalTicker
from cip.errors import PermissionDenied


class ManualTicker:
    def __init__(self) -> None:
        self.callback = None
        self.cancelled = 0

    def start(self, callback) -> None:
        self.callback = callback

    def cancel(self) -> None:
        self.callback = None
        self.cancelled += 1

    def advance(self, seconds: int) -> None:
        for _ in range(seconds):
            if self.callback is None:
                return
            self.callback()


class FakeAudioHandle:
    def __init__(self) -> None:
        self.started = False
        self.stopped = False
        self.released = False
        self.release_count = 0

    def start(self) -> None:
        self.started = True

    def stop(self) -> bytes:
        self.stopped = True
        return b"webm-bytes"

    def release(self) -> None:
        self.released = True
        self.release_count += 1


class FakeMicrophone:
    def __init__(self, denied: bool = False) -> None:
        self.denied = denied
        self.handles = []

    def acquire(self) -> FakeAudioHandle:
        if self.denied:
            raise PermissionDenied("microphone blocked")
        handle = FakeAudioHandle()
        self.handles.append(handle)
        return handle


def test_recording_stops_itself_at_sixty_seconds():
    ticker = ManualTicker()
    completed = []
    mic = FakeMicrophone()
    recorder = AudioRecorder(mic, ticker=ticker, on_complete=completed.append)

    assert recorder.start_recording() is True
    ticker.advance(75)

    assert recorder.state is RecorderState.RECORDED
    assert recorder.elapsed == 60
    assert recorder.artifact.duration == 60
    assert recorder.artifact.mime_type == AUDIO_MIME_TYPE
    assert recorder.artifact.data == b"webm-bytes"
    assert completed == [recorder.artifact]
    assert mic.handles[0].released is True


def test_early_stop_keeps_elapsed_seconds():
    ticker = ManualTicker()
    recorder = AudioRecorder(FakeMicrophone(), ticker=ticker)

    recorder.start_recording()
    ticker.advance(7)
    artifact = recorder.stop_recording()

    assert artifact.duration == 7
    assert recorder.state is RecorderState.RECORDED
    assert ticker.callback is None


def test_start_while_recording_is_ignored():
    mic = FakeMicrophone()
    recorder = AudioRecorder(mic, ticker=ManualTicker())

    assert recorder.start_recording() is True
    assert recorder.start_recording() is False
    assert len(mic.handles) == 1


def test_new_recording_requires_clear():
    mic = FakeMicrophone()
    recorder = AudioRecorder(mic, ticker=ManualTicker())
    recorder.start_recording()
    recorder.stop_recording()

    assert recorder.start_recording() is False

    recorder.clear()
    assert recorder.state is RecorderState.IDLE
    assert recorder.artifact is None
    assert recorder.start_recording() is True
    assert len(mic.handles) == 2


def test_denied_microphone_disables_recording():
    recorder = AudioRecorder(FakeMicrophone(denied=True), ticker=ManualTicker())

    assert recorder.start_recording() is False
    assert recorder.disabled
    assert recorder.artifact is None
    assert recorder.start_recording() is False


def test_close_mid_recording_releases_device():
    ticker = ManualTicker()
    mic = FakeMicrophone()
    recorder = AudioRecorder(mic, ticker=ticker)
    recorder.start_recording()
    ticker.advance(3)

    recorder.close()

    assert mic.handles[0].released is True
    assert recorder.state is RecorderState.IDLE
    assert recorder.artifact is None
    assert ticker.callback is None


def test_interval_ticker_fires_until_cancelled():
    fired = threading.Event()
    ticks = []

    def on_tick():
        ticks.append(1)
        if len(ticks) >= 3:
            fired.set()

    ticker = IntervalTicker(interval=0.01)
    ticker.start(on_tick)

    assert fired.wait(timeout=5)
    ticker.cancel()
    time.sleep(0.05)
    count = len(ticks)
    time.sleep(0.05)

    assert len(ticks) == count


def test_threaded_ticker_auto_stops_and_allows_new_recording():
    completed = []
    done = threading.Event()

    def on_complete(artifact):
        completed.append(artifact)
        done.set()

    mic = FakeMicrophone()
    recorder = AudioRecorder(
        mic, ticker=IntervalTicker(interval=0.01), max_seconds=3, on_complete=on_complete
    )

    assert recorder.start_recording() is True
    assert done.wait(timeout=5)
    assert recorder.state is RecorderState.RECORDED
    assert completed[0].duration == 3

    recorder.clear()
    done.clear()
    assert recorder.start_recording() is True
    assert done.wait(timeout=5)

    assert len(completed) == 2
    assert [handle.release_count for handle in mic.handles] == [1, 1]
    recorder.close()
