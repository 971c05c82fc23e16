"""Loudness measurement for raw audio buffers."""
from __future__ import annotations

import numpy as np


def rms_level(buffer: np.ndarray) -> float:
    """Root-mean-square amplitude of *buffer*; 0.0 for an empty buffer."""
    samples = np.asarray(buffer, dtype=np.float64)
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(samples * samples)))
