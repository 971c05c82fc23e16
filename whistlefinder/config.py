"""Application configuration loaded from YAML.

Every value has a default in ``whistlefinder.utils.constants``, so a config
file only needs the keys it changes:

```yaml
system:
  log_level: INFO
  log_file: logs/whistlefinder.log
audio:
  sample_rate: 44100
  block_size: 2048
  device: null
detection:
  sensitivity: medium
  required_frames: 4
  cooldown_s: 3.0
alerts:
  sound_file: assets/alarm.wav
  flash: true
  flash_duration_s: 0.25
  strobe_led: null
  udp_host: null
  udp_port: 5005
```
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from whistlefinder.system.sensitivity import Sensitivity
from whistlefinder.utils.constants import ALERT, AUDIO, DETECTION


@dataclass
class SystemSettings:
    log_level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class AudioSettings:
    sample_rate: int = AUDIO.sample_rate
    block_size: int = AUDIO.block_size
    device: Optional[Union[int, str]] = None


@dataclass
class DetectionSettings:
    sensitivity: Sensitivity = Sensitivity.parse(DETECTION.default_sensitivity)
    required_frames: int = DETECTION.required_frames
    cooldown_s: float = DETECTION.cooldown_s


@dataclass
class AlertSettings:
    sound_file: str = ALERT.sound_file
    flash: bool = ALERT.flash_enabled
    flash_duration_s: float = ALERT.flash_duration_s
    strobe_led: Optional[str] = None
    udp_host: Optional[str] = None
    udp_port: int = ALERT.udp_port


@dataclass
class AppConfig:
    system: SystemSettings = field(default_factory=SystemSettings)
    audio: AudioSettings = field(default_factory=AudioSettings)
    detection: DetectionSettings = field(default_factory=DetectionSettings)
    alerts: AlertSettings = field(default_factory=AlertSettings)

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        sys_data = data.get("system") or {}
        audio_data = data.get("audio") or {}
        det_data = data.get("detection") or {}
        alert_data = data.get("alerts") or {}

        system = SystemSettings(
            log_level=str(sys_data.get("log_level", "INFO")),
            log_file=sys_data.get("log_file"),
        )
        audio = AudioSettings(
            sample_rate=int(audio_data.get("sample_rate", AUDIO.sample_rate)),
            block_size=int(audio_data.get("block_size", AUDIO.block_size)),
            device=audio_data.get("device"),
        )
        detection = DetectionSettings(
            sensitivity=Sensitivity.parse(det_data.get("sensitivity", DETECTION.default_sensitivity)),
            required_frames=int(det_data.get("required_frames", DETECTION.required_frames)),
            cooldown_s=float(det_data.get("cooldown_s", DETECTION.cooldown_s)),
        )
        alerts = AlertSettings(
            sound_file=str(alert_data.get("sound_file", ALERT.sound_file)),
            flash=bool(alert_data.get("flash", ALERT.flash_enabled)),
            flash_duration_s=float(alert_data.get("flash_duration_s", ALERT.flash_duration_s)),
            strobe_led=alert_data.get("strobe_led"),
            udp_host=alert_data.get("udp_host"),
            udp_port=int(alert_data.get("udp_port", ALERT.udp_port)),
        )

        if detection.required_frames < 1:
            raise ValueError("detection.required_frames must be at least 1")
        if detection.cooldown_s < 0:
            raise ValueError("detection.cooldown_s must not be negative")
        if audio.block_size <= 0:
            raise ValueError("audio.block_size must be positive")

        return cls(system=system, audio=audio, detection=detection, alerts=alerts)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AppConfig":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {path}")
        return cls.from_dict(data)
