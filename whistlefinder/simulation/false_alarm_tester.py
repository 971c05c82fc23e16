"""False alarm stress tests."""
from __future__ import annotations

from dataclasses import dataclass

from whistlefinder.simulation.event_player import EventPlayer, Scenario
from whistlefinder.system.alarm import AlarmConfig
from whistlefinder.system.listener import WhistleListener
from whistlefinder.system.sensitivity import Sensitivity


@dataclass
class FalseAlarmMetrics:
    false_positives: int
    duration_s: float

    @property
    def per_minute(self) -> float:
        minutes = self.duration_s / 60.0
        return self.false_positives / minutes if minutes else 0.0


class FalseAlarmTester:
    """Counts detections that do not overlap any whistle in the scenario."""

    def __init__(
        self,
        listener: WhistleListener,
        scenario: Scenario,
        sensitivity: Sensitivity = Sensitivity.MEDIUM,
        tolerance_s: float = 0.5,
    ) -> None:
        self.listener = listener
        self.player = EventPlayer(scenario)
        self.sensitivity = sensitivity
        self.tolerance = tolerance_s

    def _during_whistle(self, timestamp: float) -> bool:
        for event in self.player.scenario.events:
            if event.label != "whistle":
                continue
            if event.start_s <= timestamp <= event.start_s + event.duration_s + self.tolerance:
                return True
        return False

    def run(self) -> FalseAlarmMetrics:
        processed_samples = 0
        false_positives = 0
        self.listener.start(self.sensitivity, AlarmConfig(flash_enabled=False))
        try:
            for chunk in self.player.stream(self.listener.block_size):
                processed_samples += len(chunk)
                timestamp = processed_samples / self.player.sample_rate
                if self.listener.process_buffer(chunk) and not self._during_whistle(timestamp):
                    false_positives += 1
        finally:
            self.listener.stop()
        return FalseAlarmMetrics(false_positives=false_positives, duration_s=self.player.duration_s)
