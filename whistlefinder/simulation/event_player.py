"""Scenario and event simulation utilities."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from whistlefinder.audio.mic_stream import MicStream
from whistlefinder.utils.constants import AUDIO


@dataclass
class AudioEvent:
    label: str
    start_s: float
    duration_s: float
    amplitude: float = 0.3


@dataclass
class Scenario:
    name: str
    length_s: float
    noise_level: float
    events: List[AudioEvent] = field(default_factory=list)
    seed: Optional[int] = 0


class EventPlayer:
    """Renders a scenario to a waveform and streams it in capture-sized buffers.

    Labels: ``whistle`` is a steady tone with a short fade, ``click`` a
    decaying broadband burst, ``chatter`` a low amplitude modulated tone.
    Only whistles are expected to be detected.
    """

    def __init__(self, scenario: Scenario, sample_rate: int = AUDIO.sample_rate) -> None:
        self.scenario = scenario
        self.sample_rate = sample_rate
        self._rng = np.random.default_rng(scenario.seed)
        self._timeline = self._synthesize()

    @property
    def duration_s(self) -> float:
        return len(self._timeline) / self.sample_rate

    def _synthesize(self) -> np.ndarray:
        num_samples = int(self.scenario.length_s * self.sample_rate)
        timeline = self._rng.normal(scale=self.scenario.noise_level, size=num_samples).astype(np.float32)
        for event in self.scenario.events:
            start = int(event.start_s * self.sample_rate)
            length = int(event.duration_s * self.sample_rate)
            waveform = self._event_waveform(event.label, length, event.amplitude)
            end = min(start + length, num_samples)
            timeline[start:end] += waveform[: end - start]
        return timeline

    def _event_waveform(self, label: str, length: int, amplitude: float) -> np.ndarray:
        t = np.arange(length) / self.sample_rate
        if label == "click":
            burst = self._rng.uniform(-1.0, 1.0, size=length)
            return (amplitude * burst * np.exp(-t / 0.004)).astype(np.float32)
        if label == "chatter":
            tone = np.sin(2 * np.pi * 220.0 * t) * (0.5 + 0.5 * np.sin(2 * np.pi * 3.0 * t))
            return (amplitude * tone).astype(np.float32)
        # whistle: steady tone, 10 ms fade in and out to avoid clicks
        envelope = np.ones(length)
        fade = min(int(0.01 * self.sample_rate), length // 2)
        if fade > 0:
            envelope[:fade] = np.linspace(0.0, 1.0, fade)
            envelope[-fade:] = np.linspace(1.0, 0.0, fade)
        return (amplitude * np.sin(2 * np.pi * 2000.0 * t) * envelope).astype(np.float32)

    def stream(self, chunk_size: int = AUDIO.block_size, realtime: bool = False) -> Iterable[np.ndarray]:
        mic = MicStream(self.sample_rate, chunk_size, realtime=realtime)
        return mic.from_array(self._timeline)

    def event_schedule(self) -> Dict[str, List[float]]:
        schedule: Dict[str, List[float]] = {}
        for event in self.scenario.events:
            schedule.setdefault(event.label, []).append(event.start_s)
        return schedule
