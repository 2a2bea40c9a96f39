# skyscatter/palette.py
"""
Keyframe palettes and time-of-day color interpolation
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, NamedTuple, Tuple

import numpy as np


class Stage(Enum):
    """Named points of the day anchoring the keyframe colors"""
    SUNRISE = "sunrise"
    MORNING = "morning"
    NOON = "noon"
    SUNSET = "sunset"


@dataclass(frozen=True)
class ColorRGB:
    r: int
    g: int
    b: int

    def as_unit(self) -> np.ndarray:
        """Color as a float triple in [0, 1] for the raster."""
        return np.array([self.r, self.g, self.b], dtype=np.float64) / 255.0

    def css(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


BLACK = ColorRGB(0, 0, 0)

# Top of the sky
SKY_TOP_COLORS: Mapping[Stage, ColorRGB] = {
    Stage.SUNRISE: ColorRGB(10, 20, 60),
    Stage.MORNING: ColorRGB(70, 130, 230),
    Stage.NOON: ColorRGB(0, 100, 255),
    Stage.SUNSET: ColorRGB(20, 20, 60),
}

# Horizon
SKY_HORIZON_COLORS: Mapping[Stage, ColorRGB] = {
    Stage.SUNRISE: ColorRGB(255, 100, 50),   # orange/red
    Stage.MORNING: ColorRGB(180, 220, 255),  # white-ish blue
    Stage.NOON: ColorRGB(135, 206, 235),     # sky blue
    Stage.SUNSET: ColorRGB(255, 69, 0),      # red orange
}

SUN_COLORS: Mapping[Stage, ColorRGB] = {
    Stage.SUNRISE: ColorRGB(255, 50, 0),
    Stage.MORNING: ColorRGB(255, 220, 100),
    Stage.NOON: ColorRGB(255, 255, 220),
    Stage.SUNSET: ColorRGB(255, 0, 0),
}

# Light scattered by the particles
SCATTER_COLORS: Mapping[Stage, ColorRGB] = {
    Stage.SUNRISE: ColorRGB(255, 100, 50),
    Stage.MORNING: ColorRGB(255, 255, 255),
    Stage.NOON: ColorRGB(255, 255, 255),
    Stage.SUNSET: ColorRGB(255, 50, 0),
}


class SkyColors(NamedTuple):
    top: ColorRGB
    horizon: ColorRGB
    sun: ColorRGB
    scatter: ColorRGB


def stage_color(table: Mapping[Stage, ColorRGB], stage: Stage) -> ColorRGB:
    """Keyframe lookup; a stage missing from the table resolves to black."""
    return table.get(stage, BLACK)


def _channel(a: int, b: int, factor: float) -> int:
    # half-up rounding, same result for every channel
    value = math.floor(a + (b - a) * factor + 0.5)
    return min(255, max(0, int(value)))


def interpolate_color(color1: ColorRGB, color2: ColorRGB, factor: float) -> ColorRGB:
    """Per-channel linear interpolation between two colors."""
    return ColorRGB(
        _channel(color1.r, color2.r, factor),
        _channel(color1.g, color2.g, factor),
        _channel(color1.b, color2.b, factor),
    )


def stage_span(time_value: float) -> Tuple[Stage, Stage, float]:
    """
    Select the pair of stages and the interpolation factor for a time value.

    Upper bounds are inclusive: 25 belongs to sunrise->morning and 50 to
    morning->noon, everything above 50 to noon->sunset.
    """
    if time_value <= 25:
        return Stage.SUNRISE, Stage.MORNING, time_value / 25.0
    if time_value <= 50:
        return Stage.MORNING, Stage.NOON, (time_value - 25.0) / 25.0
    return Stage.NOON, Stage.SUNSET, (time_value - 50.0) / 50.0


def colors_for(time_value: float) -> SkyColors:
    """Sky-top, horizon, sun and scatter colors for a time value in [0, 100]."""
    start, end, factor = stage_span(time_value)

    def lerp(table: Mapping[Stage, ColorRGB]) -> ColorRGB:
        return interpolate_color(stage_color(table, start), stage_color(table, end), factor)

    return SkyColors(
        top=lerp(SKY_TOP_COLORS),
        horizon=lerp(SKY_HORIZON_COLORS),
        sun=lerp(SUN_COLORS),
        scatter=lerp(SCATTER_COLORS),
    )
