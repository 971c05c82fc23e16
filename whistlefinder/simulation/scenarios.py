"""Built-in simulation scenarios."""
from __future__ import annotations

from whistlefinder.simulation.event_player import AudioEvent, Scenario


def workshop() -> Scenario:
    """Noisy workshop: hammer clicks around two whistles."""
    events = [
        AudioEvent("click", start_s=2.0, duration_s=0.05, amplitude=0.9),
        AudioEvent("whistle", start_s=5.0, duration_s=1.0, amplitude=0.3),
        AudioEvent("click", start_s=9.0, duration_s=0.05, amplitude=0.9),
        AudioEvent("click", start_s=9.3, duration_s=0.05, amplitude=0.9),
        AudioEvent("whistle", start_s=14.0, duration_s=0.8, amplitude=0.25),
    ]
    return Scenario(name="workshop", length_s=20.0, noise_level=0.01, events=events)


def kitchen() -> Scenario:
    """Quiet room with background chatter and one whistle."""
    events = [
        AudioEvent("chatter", start_s=1.0, duration_s=4.0, amplitude=0.03),
        AudioEvent("whistle", start_s=8.0, duration_s=1.2, amplitude=0.2),
        AudioEvent("chatter", start_s=12.0, duration_s=3.0, amplitude=0.03),
    ]
    return Scenario(name="kitchen", length_s=18.0, noise_level=0.005, events=events)


SCENARIOS = {
    "workshop": workshop,
    "kitchen": kitchen,
}
