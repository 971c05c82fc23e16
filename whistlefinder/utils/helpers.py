"""Utility helpers shared by multiple WhistleFinder subsystems."""
from __future__ import annotations

from pathlib import Path
from typing import Tuple

import numpy as np
import soundfile as sf


FloatArray = np.ndarray


def ensure_mono(signal: FloatArray) -> FloatArray:
    """Ensure waveform is mono by averaging channels if necessary."""
    if signal.ndim == 1:
        return signal
    return signal.mean(axis=1)


def first_channel(block: FloatArray) -> FloatArray:
    """Return channel 0 of a (frames, channels) capture block as float32."""
    block = np.asarray(block)
    if block.ndim > 1:
        block = block[:, 0]
    return block.astype(np.float32, copy=False)


def load_audio(path: str | Path, target_sr: int) -> Tuple[FloatArray, int]:
    """Load an audio file and optionally resample using librosa."""
    data, sr = sf.read(str(path), always_2d=False, dtype="float32")
    data = ensure_mono(data)
    if sr == target_sr:
        return data, sr
    # Lazy import to avoid librosa dependency unless resampling needed.
    import librosa

    resampled = librosa.resample(y=data, orig_sr=sr, target_sr=target_sr)
    return resampled.astype(np.float32), target_sr
