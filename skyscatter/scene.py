# skyscatter/scene.py
"""
Frame compositor: sky gradient, scattering particles, rays, halo and sun
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from .palette import SkyColors, colors_for
from .particles import PARTICLES_COUNT, ParticleField
from .raster import (
    Surface,
    fill_disc,
    fill_discs,
    fill_radial_glow,
    fill_vertical_gradient,
    stroke_circle,
    stroke_rays,
)

logger = logging.getLogger(__name__)

WHITE = np.array([1.0, 1.0, 1.0])


@dataclass
class SceneConfig:
    """Geometry and opacity constants of the scene"""
    particle_count: int = PARTICLES_COUNT
    particle_alpha: float = 0.6
    falloff: float = 0.6            # fraction of the diagonal where particles go dark
    ray_count: int = 12
    ray_rotation_rate: float = 0.0005  # rad per ms
    ray_inner: float = 20.0
    ray_length: Optional[float] = None  # None: surface width
    ray_width: float = 2.0
    ray_alpha: float = 0.1
    halo_inner: float = 10.0
    halo_outer: float = 120.0
    halo_alpha: float = 0.4
    sun_radius: float = 25.0
    sun_border_width: float = 2.0
    sun_border_alpha: float = 0.5


@dataclass(frozen=True)
class FrameInfo:
    colors: SkyColors
    sun_x: float
    sun_y: float


def sun_position(time_value: float, width: float, height: float) -> Tuple[float, float]:
    """
    Sun center on a single arch: bottom-left at 0, highest at 50,
    bottom-right at 100.
    """
    nx = time_value / 100.0
    sun_x = nx * width
    sun_y = height * 0.9 - height * 0.7 * math.sin(nx * math.pi)
    return sun_x, sun_y


def scatter_intensity(distance, max_dist: float, falloff: float = 0.6):
    """Linear falloff from 1 at the sun to 0 at ``falloff * max_dist``."""
    return np.maximum(0.0, 1.0 - np.asarray(distance, dtype=np.float64) / (max_dist * falloff))


class SkyRenderer:
    """Composites one frame of the sky onto a surface."""

    def __init__(self, config: Optional[SceneConfig] = None,
                 rng: Optional[Union[np.random.Generator, int]] = None):
        self.config = config or SceneConfig()
        self.particles = ParticleField().initialize(self.config.particle_count, rng)

    def render(self, surface: Surface, time_value: float,
               elapsed_ms: float) -> Optional[FrameInfo]:
        if surface.is_empty:
            return None

        cfg = self.config
        pixels = surface.pixels
        width, height = surface.width, surface.height
        colors = colors_for(time_value)
        sun_color = colors.sun.as_unit()

        fill_vertical_gradient(pixels, colors.top.as_unit(), colors.horizon.as_unit())

        sun_x, sun_y = sun_position(time_value, width, height)

        field = self.particles.advance(elapsed_ms)
        px = field.x * width
        py = field.y * height
        max_dist = math.hypot(width, height)
        intensity = scatter_intensity(np.hypot(px - sun_x, py - sun_y), max_dist, cfg.falloff)
        fill_discs(
            pixels,
            px,
            py,
            field.render_radii(elapsed_ms),
            intensity * cfg.particle_alpha,
            colors.scatter.as_unit(),
        )

        stroke_rays(
            pixels,
            sun_x,
            sun_y,
            cfg.ray_count,
            elapsed_ms * cfg.ray_rotation_rate,
            cfg.ray_inner,
            cfg.ray_length if cfg.ray_length is not None else float(width),
            cfg.ray_width,
            sun_color,
            cfg.ray_alpha,
        )

        fill_radial_glow(pixels, sun_x, sun_y, cfg.halo_inner, cfg.halo_outer,
                         sun_color, cfg.halo_alpha)

        fill_disc(pixels, sun_x, sun_y, cfg.sun_radius, sun_color)
        stroke_circle(pixels, sun_x, sun_y, cfg.sun_radius, cfg.sun_border_width,
                      WHITE, cfg.sun_border_alpha)

        return FrameInfo(colors, sun_x, sun_y)
