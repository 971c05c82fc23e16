"""Command line runner: listen on the microphone or replay a recording."""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from whistlefinder.audio.mic_stream import MicStream, ReplayInput, SoundDeviceInput
from whistlefinder.config import AppConfig
from whistlefinder.system.alarm import AlarmConfig, AlarmDispatcher
from whistlefinder.system.listener import WhistleListener
from whistlefinder.system.notifier import ConsoleNotifier, UDPNotifier
from whistlefinder.system.player import AlarmPlayer
from whistlefinder.system.sensitivity import Sensitivity
from whistlefinder.system.strobe import SimulatedStrobe, SysfsStrobe
from whistlefinder.utils.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Listen for a sustained whistle and raise an alarm.")
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument(
        "--sensitivity",
        choices=[s.name.lower() for s in Sensitivity],
        help="Detection sensitivity (default: medium)",
    )
    parser.add_argument("--no-flash", action="store_true", help="Do not pulse the strobe light")
    parser.add_argument("--device", help="Input device index or name")
    parser.add_argument("--block-size", type=int, help="Samples per audio buffer")
    parser.add_argument("--sound", help="Alarm sound file")
    parser.add_argument("--strobe-led", help="LED under /sys/class/leds to use as strobe")
    parser.add_argument("--udp-host", help="Send notifications to this host as JSON datagrams")
    parser.add_argument("--udp-port", type=int, help="Port for UDP notifications")
    parser.add_argument("--cooldown", type=float, help="Seconds between alarms (0 disables)")
    parser.add_argument("--wav", help="Replay a WAV file instead of listening to the microphone")
    parser.add_argument("--test-alert", action="store_true", help="Fire the alarm once and exit")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser


def resolve_config(args: argparse.Namespace) -> AppConfig:
    cfg = AppConfig.load(args.config) if args.config else AppConfig()
    if args.sensitivity:
        cfg.detection.sensitivity = Sensitivity.parse(args.sensitivity)
    if args.no_flash:
        cfg.alerts.flash = False
    if args.device is not None:
        cfg.audio.device = int(args.device) if args.device.isdigit() else args.device
    if args.block_size:
        cfg.audio.block_size = args.block_size
    if args.sound:
        cfg.alerts.sound_file = args.sound
    if args.strobe_led:
        cfg.alerts.strobe_led = args.strobe_led
    if args.udp_host:
        cfg.alerts.udp_host = args.udp_host
    if args.udp_port:
        cfg.alerts.udp_port = args.udp_port
    if args.cooldown is not None:
        cfg.detection.cooldown_s = args.cooldown
    if args.log_level:
        cfg.system.log_level = args.log_level
    return cfg


def build_dispatcher(cfg: AppConfig) -> AlarmDispatcher:
    strobe = SysfsStrobe(cfg.alerts.strobe_led) if cfg.alerts.strobe_led else SimulatedStrobe()
    if cfg.alerts.udp_host:
        notifier = UDPNotifier(cfg.alerts.udp_host, cfg.alerts.udp_port)
    else:
        notifier = ConsoleNotifier()
    return AlarmDispatcher(
        player=AlarmPlayer(),
        strobe=strobe,
        notifier=notifier,
        sound_file=cfg.alerts.sound_file,
        cooldown_s=cfg.detection.cooldown_s,
        flash_duration_s=cfg.alerts.flash_duration_s,
    )


def replay(cfg: AppConfig, dispatcher: AlarmDispatcher, path: str) -> int:
    stream = MicStream(cfg.audio.sample_rate, cfg.audio.block_size)
    try:
        source = ReplayInput(stream.from_wav(path))
    except (OSError, RuntimeError) as e:
        print(f"whistlefinder: could not read {path}: {e}", file=sys.stderr)
        return 2
    except ImportError:
        print(
            f"whistlefinder: {path} is not {cfg.audio.sample_rate} Hz and resampling needs librosa; "
            "install whistlefinder[resample]",
            file=sys.stderr,
        )
        return 2
    listener = WhistleListener(
        source,
        dispatcher,
        block_size=cfg.audio.block_size,
        required_frames=cfg.detection.required_frames,
    )
    listener.start(cfg.detection.sensitivity, AlarmConfig(flash_enabled=cfg.alerts.flash))
    session = listener.session
    try:
        delivered = source.run()
        listener.worker.join()
    finally:
        listener.stop()
        listener.worker.close()
    print(f"Replayed {delivered} buffers from {path}: {session.detections} whistle(s) detected")
    return 0


def listen(cfg: AppConfig, dispatcher: AlarmDispatcher) -> int:
    source = SoundDeviceInput(sample_rate=cfg.audio.sample_rate, device=cfg.audio.device)
    listener = WhistleListener(
        source,
        dispatcher,
        block_size=cfg.audio.block_size,
        required_frames=cfg.detection.required_frames,
    )
    if not listener.start(cfg.detection.sensitivity, AlarmConfig(flash_enabled=cfg.alerts.flash)):
        return 1

    import sounddevice as sd

    print("Listening... Ctrl+C to stop")
    try:
        while listener.is_listening:
            sd.sleep(100)
    except KeyboardInterrupt:
        pass
    finally:
        listener.stop()
        listener.worker.close(timeout=1.0)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = resolve_config(args)
        setup_logging(cfg.system.log_level, cfg.system.log_file)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"whistlefinder: {e}", file=sys.stderr)
        return 2

    dispatcher = build_dispatcher(cfg)

    if args.test_alert:
        report = dispatcher.fire(AlarmConfig(flash_enabled=cfg.alerts.flash), force=True)
        # The strobe must be off and the sound finished before the process exits
        dispatcher.wait_flash()
        if report.get("sound").ok:
            dispatcher.player.wait()
        print(f"Test alarm fired on: {', '.join(report.fired) or 'no channels'}")
        return 0
    if args.wav:
        return replay(cfg, dispatcher, args.wav)
    return listen(cfg, dispatcher)


if __name__ == "__main__":
    sys.exit(main())
