"""Strobe light drivers."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from whistlefinder.system.errors import ResourceUnavailable

logger = logging.getLogger(__name__)

SYSFS_LEDS = Path("/sys/class/leds")


@dataclass
class SimulatedStrobe:
    """In-memory strobe, used when no LED is configured and in tests."""

    available: bool = True
    level: float = 0.0
    history: List[Tuple[str, float]] = field(default_factory=list)

    def set_on(self, intensity: float = 1.0) -> None:
        if not self.available:
            raise ResourceUnavailable("No strobe hardware")
        if not 0.0 < intensity <= 1.0:
            raise ValueError(f"Invalid strobe intensity {intensity}")
        self.level = intensity
        self.history.append(("on", intensity))

    def set_off(self) -> None:
        self.level = 0.0
        self.history.append(("off", 0.0))

    @property
    def is_on(self) -> bool:
        return self.level > 0.0


class SysfsStrobe:
    """Drives a Linux LED class device, e.g. a laptop camera light or a GPIO LED.

    Brightness is scaled from ``intensity`` to the device's
    ``max_brightness``. Writing usually needs root or a udev rule.
    """

    def __init__(self, led_name: str, root: Path = SYSFS_LEDS) -> None:
        self.led_name = led_name
        self.path = Path(root) / led_name

    @property
    def available(self) -> bool:
        return (self.path / "brightness").exists()

    def _max_brightness(self) -> int:
        try:
            return int((self.path / "max_brightness").read_text().strip())
        except (OSError, ValueError):
            return 1

    def _write(self, value: int) -> None:
        if not self.available:
            raise ResourceUnavailable(f"LED {self.led_name!r} not found under {self.path.parent}")
        try:
            (self.path / "brightness").write_text(str(value))
        except PermissionError as e:
            raise ResourceUnavailable(f"No write access to LED {self.led_name!r}: {e}") from e

    def set_on(self, intensity: float = 1.0) -> None:
        level = max(1, round(self._max_brightness() * intensity))
        self._write(level)

    def set_off(self) -> None:
        self._write(0)
