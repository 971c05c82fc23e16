"""Sensitivity levels and the loudness cutoff each one maps to."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Union


class Sensitivity(Enum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @classmethod
    def parse(cls, value: Union["Sensitivity", str, int]) -> "Sensitivity":
        """Validate a user supplied level: a member, its name or its number."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid sensitivity: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"Invalid sensitivity: {value!r}") from None
        if isinstance(value, str):
            key = value.strip().upper()
            if key.isdigit():
                return cls.parse(int(key))
            if key in cls.__members__:
                return cls[key]
        raise ValueError(
            f"Invalid sensitivity: {value!r} (expected one of "
            f"{', '.join(m.name.lower() for m in cls)})"
        )


# Higher sensitivity -> lower cutoff
THRESHOLDS: Dict[Sensitivity, float] = {
    Sensitivity.LOW: 0.08,
    Sensitivity.MEDIUM: 0.05,
    Sensitivity.HIGH: 0.03,
}


def cutoff(sensitivity: Sensitivity) -> float:
    return THRESHOLDS[sensitivity]
