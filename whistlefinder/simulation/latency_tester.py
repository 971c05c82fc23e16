"""Latency benchmarking utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from whistlefinder.simulation.event_player import EventPlayer, Scenario
from whistlefinder.system.alarm import AlarmConfig
from whistlefinder.system.listener import WhistleListener
from whistlefinder.system.sensitivity import Sensitivity


@dataclass
class LatencyResult:
    latencies: List[float]
    misses: int

    def summary(self) -> float:
        return float(np.mean(self.latencies)) if self.latencies else float("nan")


class LatencyTester:
    """Time from whistle onset to the first detection, per whistle."""

    def __init__(
        self,
        listener: WhistleListener,
        scenario: Scenario,
        sensitivity: Sensitivity = Sensitivity.MEDIUM,
    ) -> None:
        self.listener = listener
        self.player = EventPlayer(scenario)
        self.sensitivity = sensitivity

    def run(self) -> LatencyResult:
        events = sorted(
            (e for e in self.player.scenario.events if e.label == "whistle"),
            key=lambda e: e.start_s,
        )
        seen = [False] * len(events)
        latencies: List[float] = []
        processed_samples = 0
        self.listener.start(self.sensitivity, AlarmConfig(flash_enabled=False))
        try:
            for chunk in self.player.stream(self.listener.block_size):
                processed_samples += len(chunk)
                timestamp = processed_samples / self.player.sample_rate
                if not self.listener.process_buffer(chunk):
                    continue
                for idx, event in enumerate(events):
                    end = event.start_s + event.duration_s
                    if not seen[idx] and event.start_s <= timestamp <= end + 0.5:
                        latencies.append(timestamp - event.start_s)
                        seen[idx] = True
                        break
        finally:
            self.listener.stop()
        return LatencyResult(latencies=latencies, misses=seen.count(False))
