"""Microphone input capability and simulated streams for offline replay."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generator, Iterable, Optional, Union

import numpy as np

from whistlefinder.system.errors import EngineStartFailure, PermissionDenied
from whistlefinder.utils.constants import AUDIO
from whistlefinder.utils.helpers import load_audio

logger = logging.getLogger(__name__)

BufferCallback = Callable[[np.ndarray], None]

_PERMISSION_HINTS = ("permission", "denied", "not authorized", "access")


@dataclass
class MicStream:
    """Cuts a recording into fixed-size buffers, like a capture device would."""

    sample_rate: int
    chunk_size: int
    realtime: bool = False
    sleep_factor: float = 1.0

    def from_array(self, data: np.ndarray) -> Generator[np.ndarray, None, None]:
        data = np.asarray(data, dtype=np.float32)
        total = len(data)
        for idx in range(0, total, self.chunk_size):
            chunk = data[idx : idx + self.chunk_size]
            if len(chunk) < self.chunk_size:
                pad = np.zeros(self.chunk_size - len(chunk), dtype=np.float32)
                chunk = np.concatenate((chunk, pad))
            if self.realtime:
                time.sleep(self.chunk_size / self.sample_rate * self.sleep_factor)
            yield chunk

    def from_wav(self, path: str | Path) -> Generator[np.ndarray, None, None]:
        data, _ = load_audio(path, self.sample_rate)
        return self.from_array(data)


class SoundDeviceInput:
    """Audio input capability backed by a PortAudio input stream.

    ``subscribe`` opens and starts a mono float32 stream whose callback
    hands channel 0 of every block to *callback* on the PortAudio thread.
    """

    def __init__(
        self,
        sample_rate: int = AUDIO.sample_rate,
        device: Optional[Union[int, str]] = None,
        channels: int = AUDIO.channels,
    ) -> None:
        self.sample_rate = sample_rate
        self.device = device
        self.channels = channels

    def subscribe(self, block_size: int, callback: BufferCallback):
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            # OSError when the PortAudio shared library is missing
            raise EngineStartFailure(f"Audio backend unavailable: {e}") from e

        def _on_block(indata, frames, time_info, status):
            if status:
                logger.debug("Input status: %s", status)
            callback(indata[:, 0])

        try:
            stream = sd.InputStream(
                device=self.device,
                channels=self.channels,
                samplerate=self.sample_rate,
                blocksize=block_size,
                dtype="float32",
                callback=_on_block,
            )
        except sd.PortAudioError as e:
            raise self._start_error(e) from e
        except ValueError as e:
            # sounddevice raises ValueError for unknown device names/indices
            raise EngineStartFailure(f"Invalid input device {self.device!r}: {e}") from e

        try:
            stream.start()
        except sd.PortAudioError as e:
            stream.close()
            raise self._start_error(e) from e

        logger.info(
            "Input stream started (device=%s, rate=%d, block=%d)",
            self.device if self.device is not None else "default",
            self.sample_rate,
            block_size,
        )
        return stream

    @staticmethod
    def _start_error(error: Exception) -> Exception:
        message = str(error)
        if any(hint in message.lower() for hint in _PERMISSION_HINTS):
            return PermissionDenied(f"Microphone access denied: {message}")
        return EngineStartFailure(f"Could not start input stream: {message}")

    def unsubscribe(self, handle) -> None:
        try:
            handle.stop()
            handle.close()
        except Exception as e:
            logger.warning("Error while closing input stream: %s", e)
        logger.info("Input stream closed")


class ReplayInput:
    """Audio input capability that plays pre-cut buffers synchronously.

    ``run`` delivers each buffer to the subscribed callback on the calling
    thread and stops early once the subscriber unsubscribes.
    """

    def __init__(self, chunks: Iterable[np.ndarray] = ()) -> None:
        self.chunks = chunks
        self._callback: Optional[BufferCallback] = None

    def subscribe(self, block_size: int, callback: BufferCallback):
        self._callback = callback
        return self

    def unsubscribe(self, handle) -> None:
        self._callback = None

    def run(self) -> int:
        delivered = 0
        for chunk in self.chunks:
            callback = self._callback
            if callback is None:
                break
            callback(chunk)
            delivered += 1
        return delivered
