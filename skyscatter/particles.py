# skyscatter/particles.py
"""
Field of light-scattering particles drifting across the sky
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

PARTICLES_COUNT = 150

RADIUS_RANGE = (0.5, 2.0)
SPEED_RANGE = (0.0001, 0.0006)
TWINKLE_RATE = 0.005  # rad per ms


@dataclass(frozen=True)
class Particle:
    """Snapshot of one particle (surface-relative position)"""
    x: float
    y: float
    radius: float
    speed: float
    phase: float


class ParticleField:
    """
    Fixed-size particle ensemble stored as numpy arrays.

    Only ``x`` changes after initialization; it drifts right by ``speed``
    every advance and wraps back into [0, 1).
    """

    def __init__(self):
        self.x = np.empty(0, dtype=np.float64)
        self.y = np.empty(0, dtype=np.float64)
        self.radius = np.empty(0, dtype=np.float64)
        self.speed = np.empty(0, dtype=np.float64)
        self.phase = np.empty(0, dtype=np.float64)

    @classmethod
    def from_particles(cls, particles: Iterable[Particle]) -> "ParticleField":
        field = cls()
        items = list(particles)
        field.x = np.array([p.x for p in items], dtype=np.float64)
        field.y = np.array([p.y for p in items], dtype=np.float64)
        field.radius = np.array([p.radius for p in items], dtype=np.float64)
        field.speed = np.array([p.speed for p in items], dtype=np.float64)
        field.phase = np.array([p.phase for p in items], dtype=np.float64)
        return field

    def __len__(self) -> int:
        return int(self.x.shape[0])

    def __iter__(self) -> Iterator[Particle]:
        for i in range(len(self)):
            yield Particle(
                float(self.x[i]),
                float(self.y[i]),
                float(self.radius[i]),
                float(self.speed[i]),
                float(self.phase[i]),
            )

    @property
    def populated(self) -> bool:
        return len(self) > 0

    def initialize(self, count: int = PARTICLES_COUNT,
                   rng: Optional[Union[np.random.Generator, int]] = None) -> "ParticleField":
        """
        Populate the field with ``count`` random particles.

        Calling this on an already populated field does nothing.
        """
        if self.populated:
            return self
        if count < 0:
            raise ValueError(f"Particle count must be non-negative, got {count}")
        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)

        self.x = rng.random(count)
        self.y = rng.random(count)
        self.radius = rng.uniform(RADIUS_RANGE[0], RADIUS_RANGE[1], count)
        self.speed = rng.uniform(SPEED_RANGE[0], SPEED_RANGE[1], count)
        self.phase = rng.uniform(0.0, 2.0 * np.pi, count)
        logger.debug("Initialized %d particles", count)
        return self

    def advance(self, elapsed_ms: float = 0.0) -> "ParticleField":
        """Drift every particle one step to the right, wrapping at the edge."""
        x = self.x + self.speed
        x -= np.floor(x)
        # floor can leave 1.0 for values just below an integer
        x[x >= 1.0] = 0.0
        self.x = x
        return self

    def pulse(self, elapsed_ms: float) -> np.ndarray:
        """Twinkle multiplier in [0.6, 1.0]."""
        return 0.8 + 0.2 * np.sin(elapsed_ms * TWINKLE_RATE + self.phase)

    def render_radii(self, elapsed_ms: float) -> np.ndarray:
        return self.radius * self.pulse(elapsed_ms)
