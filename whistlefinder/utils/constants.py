"""Global constants shared across WhistleFinder modules."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AudioConstants:
    sample_rate: int = 44100
    block_size: int = 2048
    channels: int = 1


@dataclass(frozen=True)
class DetectionConstants:
    required_frames: int = 4
    cooldown_s: float = 3.0
    default_sensitivity: str = "medium"


@dataclass(frozen=True)
class AlertConstants:
    sound_file: str = "assets/alarm.wav"
    flash_enabled: bool = True
    flash_duration_s: float = 0.25
    flash_intensity: float = 1.0
    notification_id: str = "WHISTLE_ALARM"
    notification_title: str = "WhistleFinder"
    notification_body: str = "Whistle detected - alarm active"
    udp_port: int = 5005
    queue_size: int = 8
    stop_wait_s: float = 2.0


AUDIO = AudioConstants()
DETECTION = DetectionConstants()
ALERT = AlertConstants()
