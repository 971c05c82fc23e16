import pytest

from whistlefinder.system.alarm import AlarmDispatcher
from whistlefinder.system.errors import EngineStartFailure, PermissionDenied, ResourceUnavailable
from whistlefinder.system.notifier import ConsoleNotifier
from whistlefinder.system.player import SimulatedPlayer
from whistlefinder.system.strobe import SimulatedStrobe


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class BrokenPlayer(SimulatedPlayer):
    def play_once(self, path):
        raise ResourceUnavailable(f"Sound file not found: {path}")


class FakeInput:
    """Audio input that records subscriptions and lets tests push buffers."""

    def __init__(self, error=None) -> None:
        self.error = error
        self.callbacks = {}
        self.subscribed = []
        self.unsubscribed = []
        self._next = 0

    def subscribe(self, block_size, callback):
        if self.error is not None:
            raise self.error
        self._next += 1
        handle = self._next
        self.callbacks[handle] = callback
        self.subscribed.append((handle, block_size))
        return handle

    def unsubscribe(self, handle):
        self.callbacks.pop(handle, None)
        self.unsubscribed.append(handle)

    def push(self, buffer):
        for callback in list(self.callbacks.values()):
            callback(buffer)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def player():
    return SimulatedPlayer()


@pytest.fixture
def strobe():
    return SimulatedStrobe()


@pytest.fixture
def notifier():
    return ConsoleNotifier()


@pytest.fixture
def dispatcher(player, strobe, notifier, clock):
    return AlarmDispatcher(
        player,
        strobe,
        notifier,
        sound_file="alarm.wav",
        cooldown_s=3.0,
        flash_duration_s=0.01,
        clock=clock,
    )


@pytest.fixture
def fake_input():
    return FakeInput()


@pytest.fixture
def denied_input():
    return FakeInput(error=PermissionDenied("Microphone access denied"))


@pytest.fixture
def broken_input():
    return FakeInput(error=EngineStartFailure("Could not start input stream"))
