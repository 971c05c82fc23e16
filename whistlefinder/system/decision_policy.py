"""Debounced whistle detector driven by per-buffer loudness."""
from __future__ import annotations

import time
from dataclasses import dataclass, field

from whistlefinder.utils.constants import DETECTION


@dataclass
class WhistleDetector:
    """Counts consecutive loud buffers and reports a sustained whistle.

    Any buffer at or below the cutoff cancels the run, so intermittent
    noise never adds up to a detection. After a detection the counter
    starts again from zero. Suppressing repeated alerts is left to the
    alarm dispatcher.
    """

    required_frames: int = DETECTION.required_frames
    consecutive_frames: int = field(default=0)
    last_trigger: float = field(default=0.0)

    def on_level(self, level: float, cutoff: float) -> bool:
        if level > cutoff:
            self.consecutive_frames += 1
        else:
            self.consecutive_frames = 0

        if self.consecutive_frames >= self.required_frames:
            self.consecutive_frames = 0
            self.last_trigger = time.monotonic()
            return True
        return False

    def reset(self) -> None:
        self.consecutive_frames = 0
        self.last_trigger = 0.0
