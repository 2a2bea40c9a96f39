# skyscatter/raster.py
"""
Drawing surface and raster primitives

Pixels are float RGB in [0, 1], shape (H, W, 3). Pixel (i, j) covers the
square [j, j+1) x [i, i+1) with its center at (j + 0.5, i + 0.5), y pointing
down. Shapes get a one-pixel antialiased edge; every primitive composites
with source-over alpha.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np
from numba import jit


def _allocate(width: int, height: int) -> np.ndarray:
    return np.zeros((height, width, 3), dtype=np.float32)


class Surface:
    """Resizable backing buffer sized in device pixels"""

    def __init__(self, width: int = 0, height: int = 0):
        if width < 0 or height < 0:
            raise ValueError(f"Surface size must be non-negative, got {width}x{height}")
        self.pixels = _allocate(width, height)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def resize(self, width: int, height: int) -> bool:
        """Reallocate the buffer; returns False when the size is unchanged."""
        if width < 0 or height < 0:
            raise ValueError(f"Surface size must be non-negative, got {width}x{height}")
        if (width, height) == self.size:
            return False
        self.pixels = _allocate(width, height)
        return True

    def to_uint8(self) -> np.ndarray:
        return (np.clip(self.pixels, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def _bounds(pixels: np.ndarray, cx: float, cy: float,
            reach: float) -> Optional[Tuple[int, int, int, int]]:
    """Pixel window (y0, y1, x0, x1) touched by a shape of radius ``reach``."""
    height, width = pixels.shape[:2]
    x0 = max(0, int(math.floor(cx - reach - 1.0)))
    x1 = min(width, int(math.ceil(cx + reach + 1.0)))
    y0 = max(0, int(math.floor(cy - reach - 1.0)))
    y1 = min(height, int(math.ceil(cy + reach + 1.0)))
    if x0 >= x1 or y0 >= y1:
        return None
    return y0, y1, x0, x1


def _distances(window: Tuple[int, int, int, int], cx: float, cy: float) -> np.ndarray:
    y0, y1, x0, x1 = window
    yy, xx = np.mgrid[y0:y1, x0:x1]
    return np.hypot(xx + 0.5 - cx, yy + 0.5 - cy)


def _blend(region: np.ndarray, color: np.ndarray, alpha: np.ndarray) -> None:
    a = alpha[..., None]
    region *= 1.0 - a
    region += color * a


# ----------------------------------------------------------------------
# Primitives
# ----------------------------------------------------------------------

def fill_vertical_gradient(pixels: np.ndarray, top: np.ndarray, bottom: np.ndarray) -> None:
    """Linear gradient from ``top`` at y=0 to ``bottom`` at y=height."""
    height = pixels.shape[0]
    if height == 0:
        return
    t = (np.arange(height, dtype=np.float64) + 0.5) / height
    rows = top[None, :] * (1.0 - t)[:, None] + bottom[None, :] * t[:, None]
    pixels[:] = rows[:, None, :]


def fill_disc(pixels: np.ndarray, cx: float, cy: float, radius: float,
              color: np.ndarray, alpha: float = 1.0) -> None:
    window = _bounds(pixels, cx, cy, radius)
    if window is None:
        return
    y0, y1, x0, x1 = window
    d = _distances(window, cx, cy)
    coverage = np.clip(radius + 0.5 - d, 0.0, 1.0)
    _blend(pixels[y0:y1, x0:x1], color, alpha * coverage)


def stroke_circle(pixels: np.ndarray, cx: float, cy: float, radius: float,
                  line_width: float, color: np.ndarray, alpha: float = 1.0) -> None:
    """Ring of ``line_width`` centered on the circle outline."""
    half = line_width / 2.0
    window = _bounds(pixels, cx, cy, radius + half)
    if window is None:
        return
    y0, y1, x0, x1 = window
    d = _distances(window, cx, cy)
    coverage = np.clip(half + 0.5 - np.abs(d - radius), 0.0, 1.0)
    _blend(pixels[y0:y1, x0:x1], color, alpha * coverage)


def fill_radial_glow(pixels: np.ndarray, cx: float, cy: float, inner: float, outer: float,
                     color: np.ndarray, alpha: float = 1.0) -> None:
    """
    Disc of radius ``outer`` whose color fades from opaque at ``inner``
    to fully transparent at ``outer``.
    """
    window = _bounds(pixels, cx, cy, outer)
    if window is None:
        return
    y0, y1, x0, x1 = window
    d = _distances(window, cx, cy)
    span = max(outer - inner, 1e-9)
    fade = 1.0 - np.clip((d - inner) / span, 0.0, 1.0)
    coverage = np.clip(outer + 0.5 - d, 0.0, 1.0)
    _blend(pixels[y0:y1, x0:x1], color, alpha * fade * coverage)


@jit(nopython=True, cache=True)
def _splat_discs(pixels, xs, ys, radii, alphas, color):
    height = pixels.shape[0]
    width = pixels.shape[1]
    for k in range(xs.shape[0]):
        alpha = alphas[k]
        r = radii[k]
        if alpha <= 0.0 or r <= 0.0:
            continue
        x0 = max(0, int(math.floor(xs[k] - r - 1.0)))
        x1 = min(width, int(math.ceil(xs[k] + r + 1.0)))
        y0 = max(0, int(math.floor(ys[k] - r - 1.0)))
        y1 = min(height, int(math.ceil(ys[k] + r + 1.0)))
        for i in range(y0, y1):
            dy = i + 0.5 - ys[k]
            for j in range(x0, x1):
                dx = j + 0.5 - xs[k]
                cover = r + 0.5 - math.sqrt(dx * dx + dy * dy)
                if cover <= 0.0:
                    continue
                if cover > 1.0:
                    cover = 1.0
                a = alpha * cover
                for ch in range(3):
                    pixels[i, j, ch] = pixels[i, j, ch] * (1.0 - a) + color[ch] * a


def fill_discs(pixels: np.ndarray, xs: np.ndarray, ys: np.ndarray, radii: np.ndarray,
               alphas: np.ndarray, color: np.ndarray) -> None:
    """Many small discs of one color, each with its own radius and opacity."""
    _splat_discs(
        pixels,
        np.ascontiguousarray(xs, dtype=np.float64),
        np.ascontiguousarray(ys, dtype=np.float64),
        np.ascontiguousarray(radii, dtype=np.float64),
        np.ascontiguousarray(alphas, dtype=np.float64),
        np.ascontiguousarray(color, dtype=np.float64),
    )


@jit(nopython=True, cache=True)
def _stroke_rays(pixels, cx, cy, rotation, count, inner, length, half_width, alpha, color):
    height = pixels.shape[0]
    width = pixels.shape[1]
    step = 2.0 * math.pi / count
    for i in range(height):
        dy = i + 0.5 - cy
        for j in range(width):
            dx = j + 0.5 - cx
            # nearest ray by angle is also the nearest by perpendicular distance
            k = math.floor((math.atan2(dy, dx) - rotation) / step + 0.5)
            angle = rotation + k * step
            c = math.cos(angle)
            s = math.sin(angle)
            along = dx * c + dy * s
            if along < inner or along > length:
                continue
            cover = half_width + 0.5 - abs(dy * c - dx * s)
            if cover <= 0.0:
                continue
            if cover > 1.0:
                cover = 1.0
            a = alpha * cover
            for ch in range(3):
                pixels[i, j, ch] = pixels[i, j, ch] * (1.0 - a) + color[ch] * a


def stroke_rays(pixels: np.ndarray, cx: float, cy: float, count: int, rotation: float,
                inner: float, length: float, line_width: float,
                color: np.ndarray, alpha: float = 1.0) -> None:
    """
    ``count`` evenly spaced radial segments around (cx, cy), the first one at
    angle ``rotation``, each running from radius ``inner`` to ``length``.
    """
    if count <= 0 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
        return
    _stroke_rays(
        pixels,
        float(cx),
        float(cy),
        float(rotation),
        int(count),
        float(inner),
        float(length),
        float(line_width) / 2.0,
        float(alpha),
        np.ascontiguousarray(color, dtype=np.float64),
    )
