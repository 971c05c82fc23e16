"""Write the default alarm sound: two-tone beeps with a short fade."""
from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np
import soundfile as sf

from whistlefinder.utils.constants import ALERT


def alarm_tone(sample_rate: int, beeps: int = 4, beep_s: float = 0.25, gap_s: float = 0.1) -> np.ndarray:
    t = np.arange(int(beep_s * sample_rate)) / sample_rate
    fade = np.minimum(1.0, np.minimum(t, t[::-1]) / 0.01)
    gap = np.zeros(int(gap_s * sample_rate))
    parts = []
    for idx in range(beeps):
        freq = 880.0 if idx % 2 == 0 else 1320.0
        parts.append(0.6 * np.sin(2 * np.pi * freq * t) * fade)
        parts.append(gap)
    return np.concatenate(parts).astype(np.float32)


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate the WhistleFinder alarm sound.")
    parser.add_argument("--output", default=ALERT.sound_file)
    parser.add_argument("--sample_rate", type=int, default=44100)
    args = parser.parse_args()

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(out), alarm_tone(args.sample_rate), args.sample_rate, subtype="PCM_16")
    print(f"Alarm sound written to {out}")


if __name__ == "__main__":
    main()
