"""Skyscatter public API."""

from .palette import (
    ColorRGB,
    SkyColors,
    Stage,
    colors_for,
    interpolate_color,
    stage_color,
    stage_span,
)
from .particles import PARTICLES_COUNT, Particle, ParticleField
from .raster import Surface
from .scene import FrameInfo, SceneConfig, SkyRenderer, scatter_intensity, sun_position
from .scheduler import FrameScheduler, ManualFrameHost, SimulationState, StateCell
from .insight import Insight, describe, phase_for
from .interactive import InteractiveConfig, SkyView, run_interactive
from .output import render_sequence, save_mp4, save_ppm

__all__ = [
    "ColorRGB",
    "SkyColors",
    "Stage",
    "colors_for",
    "interpolate_color",
    "stage_color",
    "stage_span",
    "PARTICLES_COUNT",
    "Particle",
    "ParticleField",
    "Surface",
    "FrameInfo",
    "SceneConfig",
    "SkyRenderer",
    "scatter_intensity",
    "sun_position",
    "FrameScheduler",
    "ManualFrameHost",
    "SimulationState",
    "StateCell",
    "Insight",
    "describe",
    "phase_for",
    "InteractiveConfig",
    "SkyView",
    "run_interactive",
    "render_sequence",
    "save_mp4",
    "save_ppm",
]

__version__ = "0.1.0"
