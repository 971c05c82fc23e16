import time

import numpy as np

from whistlefinder.system.alarm import AlarmConfig, AlarmDispatcher
from whistlefinder.system.listener import WhistleListener
from whistlefinder.system.player import SimulatedPlayer
from whistlefinder.system.sensitivity import Sensitivity


def tone(level: float, size: int = 2048) -> np.ndarray:
    """Constant buffer whose RMS equals *level*."""
    return np.full(size, level, dtype=np.float32)


def make_listener(audio_input, dispatcher):
    return WhistleListener(audio_input, dispatcher, block_size=2048)


def test_start_subscribes_once(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    assert listener.start(Sensitivity.MEDIUM, AlarmConfig())
    assert listener.is_listening
    assert listener.state == "listening"
    assert fake_input.subscribed == [(1, 2048)]
    listener.stop()


def test_medium_scenario_fires_after_fourth_buffer(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM, AlarmConfig(flash_enabled=False))
    results = [listener.process_buffer(tone(0.06)) for _ in range(4)]
    assert results == [False, False, False, True]
    assert listener.session.detections == 1
    listener.stop()


def test_dip_scenario_fires_on_seventh_buffer(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM, AlarmConfig(flash_enabled=False))
    levels = [0.06, 0.06, 0.04, 0.06, 0.06, 0.06, 0.06]
    results = [listener.process_buffer(tone(level)) for level in levels]
    assert results == [False] * 6 + [True]
    listener.stop()


def test_pushed_buffers_reach_the_dispatcher(fake_input, dispatcher, player):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.HIGH, AlarmConfig(flash_enabled=False))
    for _ in range(4):
        fake_input.push(tone(0.04))
    listener.worker.join()
    assert player.history == [("once", "alarm.wav")]
    listener.stop()
    listener.worker.close(timeout=1.0)


def test_low_sensitivity_ignores_moderate_sound(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.LOW)
    assert not any(listener.process_buffer(tone(0.06)) for _ in range(8))
    listener.stop()


def test_multichannel_buffers_use_first_channel(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM)
    stereo = np.zeros((2048, 2), dtype=np.float32)
    stereo[:, 1] = 0.5
    assert not any(listener.process_buffer(stereo) for _ in range(4))
    listener.stop()


def test_restart_tears_down_previous_subscription(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM)
    first = listener.session
    listener.process_buffer(tone(0.06))
    listener.start(Sensitivity.HIGH)
    assert fake_input.unsubscribed == [1]
    assert list(fake_input.callbacks) == [2]
    assert not first.active
    assert listener.session.detector.consecutive_frames == 0
    listener.stop()


def test_stale_callback_is_ignored_after_stop(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM)
    callback = fake_input.callbacks[1]
    listener.stop()
    assert callback(tone(0.5)) is False
    assert listener.process_buffer(tone(0.5)) is False


def test_stop_is_idempotent(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM)
    listener.stop()
    listener.stop()
    assert listener.state == "stopped"
    assert listener.session is None
    assert fake_input.unsubscribed == [1]


def test_stop_without_start_is_a_noop(fake_input, dispatcher):
    listener = make_listener(fake_input, dispatcher)
    listener.stop()
    assert not listener.is_listening
    assert fake_input.unsubscribed == []


def test_stop_silences_alarm(fake_input, dispatcher, player, notifier):
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM)
    listener.test_alert()
    listener.stop()
    assert player.history[-1] == ("stop", "")
    assert notifier.pending == {}


def test_permission_denied_stays_stopped(denied_input, dispatcher):
    listener = make_listener(denied_input, dispatcher)
    assert listener.start(Sensitivity.MEDIUM) is False
    assert listener.state == "stopped"


def test_engine_failure_stays_stopped(broken_input, dispatcher):
    listener = make_listener(broken_input, dispatcher)
    assert listener.start("high") is False
    assert not listener.is_listening


def test_test_alert_while_stopped_fires_enabled_channels(fake_input, dispatcher, strobe, notifier):
    listener = make_listener(fake_input, dispatcher)
    report = listener.test_alert(AlarmConfig(flash_enabled=True))
    assert report.fired == ["sound", "strobe", "notification"]
    assert strobe.history[0] == ("on", 1.0)
    assert notifier.published == 1
    assert fake_input.subscribed == []


def test_test_alert_ignores_cooldown(fake_input, dispatcher, player):
    listener = make_listener(fake_input, dispatcher)
    listener.test_alert()
    listener.test_alert()
    assert len(player.history) == 2


class SlowPlayer(SimulatedPlayer):
    def play_once(self, path):
        time.sleep(0.2)
        super().play_once(path)


def test_stop_drops_alarms_still_queued(fake_input, strobe, notifier):
    player = SlowPlayer()
    dispatcher = AlarmDispatcher(
        player, strobe, notifier, sound_file="alarm.wav", cooldown_s=0, flash_duration_s=0.01
    )
    listener = make_listener(fake_input, dispatcher)
    listener.start(Sensitivity.MEDIUM, AlarmConfig())
    for _ in range(8):
        fake_input.push(tone(0.06))
    assert listener.session.detections == 2

    listener.stop()
    listener.worker.join()
    stopped_at = player.history.index(("stop", ""))
    assert ("once", "alarm.wav") not in player.history[stopped_at:]
    assert notifier.pending == {}
    assert not strobe.is_on
    listener.worker.close(timeout=1.0)
