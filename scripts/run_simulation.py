"""Run WhistleFinder scenario simulations."""
from __future__ import annotations

import argparse

from whistlefinder.audio.mic_stream import ReplayInput
from whistlefinder.simulation.false_alarm_tester import FalseAlarmTester
from whistlefinder.simulation.latency_tester import LatencyTester
from whistlefinder.simulation.scenarios import SCENARIOS
from whistlefinder.system.alarm import AlarmDispatcher
from whistlefinder.system.listener import WhistleListener
from whistlefinder.system.notifier import ConsoleNotifier
from whistlefinder.system.player import SimulatedPlayer
from whistlefinder.system.sensitivity import Sensitivity
from whistlefinder.system.strobe import SimulatedStrobe


def main() -> None:
    parser = argparse.ArgumentParser(description="Run WhistleFinder simulations.")
    parser.add_argument("scenario", choices=SCENARIOS.keys(), help="Scenario name")
    parser.add_argument(
        "--sensitivity",
        choices=[s.name.lower() for s in Sensitivity],
        default="medium",
    )
    args = parser.parse_args()

    scenario = SCENARIOS[args.scenario]()
    sensitivity = Sensitivity.parse(args.sensitivity)
    dispatcher = AlarmDispatcher(SimulatedPlayer(), SimulatedStrobe(), ConsoleNotifier(), cooldown_s=0)
    listener = WhistleListener(ReplayInput(), dispatcher)

    latency = LatencyTester(listener, scenario, sensitivity).run()
    false_alarm = FalseAlarmTester(listener, scenario, sensitivity).run()
    listener.worker.close()
    print(f"Mean detection latency: {latency.summary():.3f}s")
    print(f"Missed whistles: {latency.misses}")
    print(f"False positives per minute: {false_alarm.per_minute:.2f}")


if __name__ == "__main__":
    main()
