"""Plain-language explanation of the scattering at a given time of day."""

from __future__ import annotations

from dataclasses import dataclass

MORNING_END = 33.0
EVENING_START = 66.0


@dataclass(frozen=True)
class Insight:
    title: str
    description: str
    physics_note: str
    path_length: float  # percent of the longest path
    path_label: str
    scattered_light: str

    def as_text(self) -> str:
        return (
            f"{self.title}\n\n{self.description}\n\n"
            f"Physics insight:\n{self.physics_note}\n\n"
            f"Path length: {self.path_label}\n"
            f"Scattered light: {self.scattered_light}"
        )


def phase_for(time_value: float) -> str:
    """Phase of the day: ``sunrise`` below 33, ``noon`` up to 66, ``sunset`` after."""
    if time_value < MORNING_END:
        return "sunrise"
    if time_value <= EVENING_START:
        return "noon"
    return "sunset"


def describe(time_value: float) -> Insight:
    phase = phase_for(time_value)
    if phase == "sunrise":
        title = "Morning / Sunrise"
        description = "The sun is low on the horizon."
        note = (
            "Sunlight travels through a thicker layer of atmosphere. Much of the blue "
            "light is scattered away before reaching your eyes, allowing longer "
            "wavelengths (yellows, oranges, reds) to dominate the sky color near the sun."
        )
    elif phase == "noon":
        title = "Midday / Noon"
        description = "The sun is high overhead."
        note = (
            "Sunlight takes a shorter, more direct path through the atmosphere. Rayleigh "
            "scattering is strongest for short wavelengths (blue/violet). We see this "
            "scattered blue light coming from all directions, creating a blue sky."
        )
    else:
        title = "Evening / Sunset"
        description = "The sun dips towards the horizon again."
        note = (
            "The path of light through the atmosphere is at its longest. Almost all blue "
            "light is scattered out of the direct beam. Only the longest wavelengths "
            "(reds and oranges) penetrate through to the observer, painting the horizon red."
        )

    offset = abs(time_value - 50.0)
    return Insight(
        title=title,
        description=description,
        physics_note=note,
        path_length=offset * 2.0,
        path_label="Short (Direct)" if offset < 20.0 else "Long (Atmospheric)",
        scattered_light=(
            "Blue Dominant" if MORNING_END < time_value < EVENING_START
            else "Red/Orange Dominant"
        ),
    )
