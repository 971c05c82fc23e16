"""Listening session lifecycle: microphone subscription to alarm dispatch."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from whistlefinder.audio.level_meter import rms_level
from whistlefinder.system.alarm import AlarmConfig, AlarmDispatcher, AlarmReport, AlertWorker
from whistlefinder.system.decision_policy import WhistleDetector
from whistlefinder.system.errors import WhistleFinderError
from whistlefinder.system.sensitivity import Sensitivity, cutoff
from whistlefinder.utils.constants import AUDIO, DETECTION
from whistlefinder.utils.helpers import first_channel

logger = logging.getLogger(__name__)


@dataclass
class Session:
    sensitivity: Sensitivity
    config: AlarmConfig
    cutoff: float
    detector: WhistleDetector
    handle: Any = None
    active: bool = True
    buffers: int = field(default=0)
    detections: int = field(default=0)


class WhistleListener:
    """Owns the audio subscription and feeds buffers through detection.

    Buffers arrive on the audio thread. Each one is measured and counted
    there; a detection only enqueues an alarm on the worker thread, so the
    callback never waits on playback, strobe or notification.
    """

    def __init__(
        self,
        audio_input,
        dispatcher: AlarmDispatcher,
        block_size: int = AUDIO.block_size,
        required_frames: int = DETECTION.required_frames,
        worker: Optional[AlertWorker] = None,
    ) -> None:
        self.audio_input = audio_input
        self.dispatcher = dispatcher
        self.block_size = block_size
        self.required_frames = required_frames
        self.worker = worker or AlertWorker(dispatcher)
        self._lock = threading.Lock()
        self._session: Optional[Session] = None

    @property
    def is_listening(self) -> bool:
        session = self._session
        return session is not None and session.active

    @property
    def state(self) -> str:
        return "listening" if self.is_listening else "stopped"

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def start(self, sensitivity: Sensitivity, config: Optional[AlarmConfig] = None) -> bool:
        """Begin listening. Returns False and stays stopped if input fails."""
        sensitivity = Sensitivity.parse(sensitivity)
        config = config or AlarmConfig()
        with self._lock:
            self._teardown()
            session = Session(
                sensitivity=sensitivity,
                config=config,
                cutoff=cutoff(sensitivity),
                detector=WhistleDetector(required_frames=self.required_frames),
            )
            self.worker.start()
            try:
                session.handle = self.audio_input.subscribe(
                    self.block_size, lambda buffer: self._on_buffer(session, buffer)
                )
            except WhistleFinderError as e:
                logger.error("Could not start listening: %s", e)
                return False
            self._session = session

        logger.info(
            "Listening (sensitivity=%s, cutoff=%.2f, flash=%s)",
            sensitivity.name.lower(),
            session.cutoff,
            config.flash_enabled,
        )
        return True

    def stop(self) -> None:
        """Stop listening and silence any active alarm. Safe to call twice.

        Queued alarms of the stopped session are dropped and one already
        being dispatched is waited for, so nothing fires after silence.
        """
        with self._lock:
            was_listening = self._teardown()
        self.worker.cancel_pending()
        self.dispatcher.silence()
        if was_listening:
            logger.info("Stopped listening")

    def test_alert(self, config: Optional[AlarmConfig] = None) -> AlarmReport:
        """Fire every enabled channel now, without detection or cooldown."""
        if config is None:
            session = self._session
            config = session.config if session is not None else AlarmConfig()
        return self.dispatcher.fire(config, force=True)

    def process_buffer(self, buffer: np.ndarray) -> bool:
        """Run one buffer through detection. Returns True on a detection."""
        session = self._session
        if session is None:
            return False
        return self._on_buffer(session, buffer)

    def _on_buffer(self, session: Session, buffer: np.ndarray) -> bool:
        if not session.active:
            return False
        session.buffers += 1
        level = rms_level(first_channel(buffer))
        if not session.detector.on_level(level, session.cutoff):
            return False
        session.detections += 1
        logger.debug("Whistle detected (level=%.4f, buffer=%d)", level, session.buffers)
        self.worker.submit(session.config, session)
        return True

    def _teardown(self) -> bool:
        session = self._session
        if session is None:
            return False
        # Mark inactive first so an in-flight callback becomes a no-op
        session.active = False
        self._session = None
        if session.handle is not None:
            self.audio_input.unsubscribe(session.handle)
        session.detector.reset()
        return True
