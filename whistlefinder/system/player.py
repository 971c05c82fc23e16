"""Alarm sound playback through the default output device."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import soundfile as sf

from whistlefinder.system.errors import ResourceUnavailable

logger = logging.getLogger(__name__)


class AlarmPlayer:
    """Playback capability: one-shot and looping playback of sound files.

    Decoded files are cached, so only the first alarm pays for reading the
    file. Playback is non-blocking; a new call replaces whatever is playing.
    """

    def __init__(self, device: Optional[int] = None) -> None:
        self.device = device
        self._cache: Dict[Path, Tuple[np.ndarray, int]] = {}

    def _load(self, path: str | Path) -> Tuple[np.ndarray, int]:
        path = Path(path)
        if path in self._cache:
            return self._cache[path]
        if not path.is_file():
            raise ResourceUnavailable(f"Sound file not found: {path}")
        try:
            data, sr = sf.read(str(path), dtype="float32", always_2d=False)
        except (OSError, RuntimeError) as e:
            raise ResourceUnavailable(f"Could not decode {path}: {e}") from e
        self._cache[path] = (data, sr)
        return data, sr

    def _play(self, data: np.ndarray, sr: int, loop: bool) -> None:
        import sounddevice as sd

        try:
            sd.play(data, sr, loop=loop, device=self.device)
        except sd.PortAudioError as e:
            raise ResourceUnavailable(f"No usable output device: {e}") from e

    def play_once(self, path: str | Path) -> None:
        data, sr = self._load(path)
        self._play(data, sr, loop=False)
        logger.debug("Playing %s once", path)

    def play_loop(self, path: str | Path, volume: float = 1.0) -> None:
        data, sr = self._load(path)
        self._play(data * float(np.clip(volume, 0.0, 1.0)), sr, loop=True)
        logger.debug("Looping %s at volume %.3f", path, volume)

    def stop_all(self) -> None:
        import sounddevice as sd

        sd.stop()

    def wait(self) -> None:
        """Block until the current one-shot playback has finished."""
        import sounddevice as sd

        sd.wait()


@dataclass
class SimulatedPlayer:
    """Records playback requests instead of making sound."""

    history: List[Tuple[str, str]] = field(default_factory=list)

    def play_once(self, path: str | Path) -> None:
        self.history.append(("once", str(path)))

    def play_loop(self, path: str | Path, volume: float = 1.0) -> None:
        self.history.append(("loop", str(path)))

    def stop_all(self) -> None:
        self.history.append(("stop", ""))

    def wait(self) -> None:
        pass
