import numpy as np
import pytest

from whistlefinder.audio.mic_stream import SoundDeviceInput
from whistlefinder.system.errors import EngineStartFailure, PermissionDenied

try:
    import sounddevice as sd
except (ImportError, OSError):
    sd = None

pytestmark = pytest.mark.skipif(sd is None, reason="sounddevice/PortAudio not available")


class FakeStream:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.started = False
        self.closed = False

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True


def failing_stream(message):
    def _open(**kwargs):
        raise sd.PortAudioError(message)

    return _open


def test_subscribe_opens_mono_float_stream(monkeypatch):
    monkeypatch.setattr(sd, "InputStream", FakeStream)
    received = []
    source = SoundDeviceInput(sample_rate=16000, device=1)
    handle = source.subscribe(1024, received.append)
    assert handle.started
    assert handle.kwargs["blocksize"] == 1024
    assert handle.kwargs["dtype"] == "float32"
    assert handle.kwargs["samplerate"] == 16000

    block = np.zeros((1024, 1), dtype=np.float32)
    block[:, 0] = 0.1
    handle.kwargs["callback"](block, 1024, None, None)
    np.testing.assert_allclose(received[0], 0.1)

    source.unsubscribe(handle)
    assert handle.closed


def test_permission_failure(monkeypatch):
    monkeypatch.setattr(sd, "InputStream", failing_stream("Permission denied"))
    with pytest.raises(PermissionDenied):
        SoundDeviceInput().subscribe(2048, lambda buffer: None)


def test_engine_failure(monkeypatch):
    monkeypatch.setattr(sd, "InputStream", failing_stream("Invalid sample rate"))
    with pytest.raises(EngineStartFailure):
        SoundDeviceInput().subscribe(2048, lambda buffer: None)


def test_stream_closed_when_start_fails(monkeypatch):
    opened = []

    class RefusingStream(FakeStream):
        def start(self):
            raise sd.PortAudioError("Device unavailable")

    def open_stream(**kwargs):
        stream = RefusingStream(**kwargs)
        opened.append(stream)
        return stream

    monkeypatch.setattr(sd, "InputStream", open_stream)
    with pytest.raises(EngineStartFailure):
        SoundDeviceInput().subscribe(2048, lambda buffer: None)
    assert len(opened) == 1
    assert opened[0].closed
