"""Alarm dispatch: sound, strobe and notification channels with cooldown."""
from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from whistlefinder.system.errors import ResourceUnavailable, WhistleFinderError
from whistlefinder.utils.constants import ALERT, DETECTION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlarmConfig:
    flash_enabled: bool = ALERT.flash_enabled


@dataclass
class ChannelResult:
    channel: str
    ok: bool
    skipped: bool = False
    error: Optional[str] = None


@dataclass
class AlarmReport:
    results: List[ChannelResult] = field(default_factory=list)

    def get(self, channel: str) -> Optional[ChannelResult]:
        for result in self.results:
            if result.channel == channel:
                return result
        return None

    @property
    def fired(self) -> List[str]:
        return [r.channel for r in self.results if r.ok]


class AlarmDispatcher:
    """Fires every enabled alert channel for one detection.

    Channels are independent: a failure in one is logged and recorded in
    the returned report, and the remaining channels still fire. Detection
    driven alarms inside ``cooldown_s`` of the previous alarm are dropped;
    ``force=True`` bypasses the cooldown. A cooldown of 0 disables it.
    """

    def __init__(
        self,
        player,
        strobe,
        notifier,
        sound_file: str | Path = ALERT.sound_file,
        cooldown_s: float = DETECTION.cooldown_s,
        flash_duration_s: float = ALERT.flash_duration_s,
        flash_intensity: float = ALERT.flash_intensity,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.player = player
        self.strobe = strobe
        self.notifier = notifier
        self.sound_file = Path(sound_file)
        self.cooldown_s = cooldown_s
        self.flash_duration_s = flash_duration_s
        self.flash_intensity = flash_intensity
        self.clock = clock
        self._lock = threading.Lock()
        self._last_fire: Optional[float] = None
        self._flash_lock = threading.Lock()
        self._flash_timer: Optional[threading.Timer] = None

    def fire(self, config: AlarmConfig, force: bool = False) -> Optional[AlarmReport]:
        with self._lock:
            now = self.clock()
            if (
                not force
                and self.cooldown_s > 0
                and self._last_fire is not None
                and now - self._last_fire < self.cooldown_s
            ):
                logger.debug("Alarm suppressed, %.2fs into cooldown", now - self._last_fire)
                return None
            self._last_fire = now

        logger.info("Whistle alarm fired%s", " (test)" if force else "")
        report = AlarmReport()
        report.results.append(self._run("sound", self._play_sound))
        if config.flash_enabled and getattr(self.strobe, "available", True):
            report.results.append(self._run("strobe", self._flash))
        else:
            report.results.append(ChannelResult("strobe", ok=False, skipped=True))
        report.results.append(self._run("notification", self._notify))
        return report

    def silence(self) -> AlarmReport:
        """Stop playback, switch the strobe off and withdraw the notification."""
        report = AlarmReport()
        report.results.append(self._run("sound", self.player.stop_all))
        with self._flash_lock:
            timer, self._flash_timer = self._flash_timer, None
            if timer is not None:
                timer.cancel()
            if getattr(self.strobe, "available", True):
                report.results.append(self._run("strobe", self.strobe.set_off))
        report.results.append(
            self._run("notification", lambda: self.notifier.withdraw(ALERT.notification_id))
        )
        return report

    def _run(self, channel: str, action: Callable[[], None]) -> ChannelResult:
        try:
            action()
        except ResourceUnavailable as e:
            logger.info("%s channel skipped: %s", channel, e)
            return ChannelResult(channel, ok=False, error=str(e))
        except WhistleFinderError as e:
            logger.warning("%s channel failed: %s", channel, e)
            return ChannelResult(channel, ok=False, error=str(e))
        except Exception as e:
            logger.exception("Unexpected error in %s channel", channel)
            return ChannelResult(channel, ok=False, error=str(e))
        return ChannelResult(channel, ok=True)

    def _play_sound(self) -> None:
        self.player.play_once(self.sound_file)

    def wait_flash(self, timeout: Optional[float] = None) -> bool:
        """Block until a pending flash pulse has switched the strobe off.

        Returns False if the pulse is still running after *timeout*.
        """
        with self._flash_lock:
            timer = self._flash_timer
        if timer is None:
            return True
        timer.join(timeout)
        return not timer.is_alive()

    def _flash(self) -> None:
        # set_on and the timer swap must not interleave with silence()
        with self._flash_lock:
            self.strobe.set_on(self.flash_intensity)
            timer = threading.Timer(self.flash_duration_s, self._flash_off)
            timer.daemon = True
            previous, self._flash_timer = self._flash_timer, timer
            if previous is not None:
                previous.cancel()
            timer.start()

    def _flash_off(self) -> None:
        with self._flash_lock:
            # A superseded or silenced pulse leaves the strobe alone
            if self._flash_timer is not threading.current_thread():
                return
            self._flash_timer = None
            try:
                self.strobe.set_off()
            except Exception as e:
                logger.warning("Could not switch strobe off: %s", e)

    def _notify(self) -> None:
        self.notifier.publish(
            ALERT.notification_id,
            ALERT.notification_title,
            ALERT.notification_body,
        )


class AlertWorker:
    """Runs alarm dispatch on its own thread.

    The capture callback only enqueues a request; when the queue is full
    the request is dropped, since an alarm is already on its way. A request
    submitted with a *session* is skipped once that session has stopped.
    """

    def __init__(self, dispatcher: AlarmDispatcher, maxsize: int = ALERT.queue_size) -> None:
        self.dispatcher = dispatcher
        self._queue: "queue.Queue[Optional[Tuple[AlarmConfig, Any]]]" = queue.Queue(maxsize=maxsize)
        self._busy = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._loop, name="alert-worker", daemon=True)
        self._thread.start()

    def submit(self, config: AlarmConfig, session: Any = None) -> bool:
        try:
            self._queue.put_nowait((config, session))
        except queue.Full:
            logger.debug("Alert queue full, dropping request")
            return False
        return True

    def _loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                config, session = item
                with self._busy:
                    if session is not None and not session.active:
                        logger.debug("Skipping alarm for a stopped session")
                        continue
                    self.dispatcher.fire(config)
                    # Session stopped while this alarm was going out
                    if session is not None and not session.active:
                        self.dispatcher.silence()
            except Exception:
                logger.exception("Alarm dispatch failed")
            finally:
                self._queue.task_done()

    def _drain(self) -> int:
        dropped = 0
        shutdown = False
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            self._queue.task_done()
            if item is None:
                shutdown = True
            else:
                dropped += 1
        if shutdown:
            self._queue.put_nowait(None)
        return dropped

    def cancel_pending(self, timeout: Optional[float] = ALERT.stop_wait_s) -> bool:
        """Drop queued requests and wait for the one being dispatched.

        Returns False if the in-flight dispatch is still running after
        *timeout*. From the worker thread itself only the queue is dropped.
        """
        dropped = self._drain()
        if dropped:
            logger.debug("Dropped %d queued alarm request(s)", dropped)
        if threading.current_thread() is self._thread:
            return True
        if not self._busy.acquire(timeout=-1 if timeout is None else timeout):
            logger.warning("Alarm dispatch still running after %.1fs", timeout)
            return False
        self._busy.release()
        return True

    def join(self) -> None:
        """Block until every submitted request has been dispatched."""
        self._queue.join()

    def close(self, timeout: Optional[float] = None) -> None:
        """Drop queued requests and stop the worker thread."""
        thread = self._thread
        if thread is None:
            return
        self._drain()
        try:
            self._queue.put(None, timeout=timeout)
        except queue.Full:
            logger.warning("Alert queue still full, worker not told to exit")
        thread.join(timeout)
        self._thread = None
