"""Saving rendered frames: PPM stills and MP4 sequences."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List, Optional
import logging

import numpy as np

from .raster import Surface
from .scene import FrameInfo, SceneConfig, SkyRenderer
from .scheduler import AUTO_ADVANCE_STEP, FrameScheduler, ManualFrameHost, StateCell

logger = logging.getLogger(__name__)

ADVANCE_INTERVAL_MS = 30.0


def _as_rgb(image: np.ndarray) -> np.ndarray:
    """View a gray (H, W) or (H, W, 1) image, or an RGB(A) one, as (H, W, 3)."""
    if image.ndim == 2:
        image = image[:, :, None]
    channels = image.shape[-1] if image.ndim == 3 else 0
    if channels == 1:
        return np.broadcast_to(image, image.shape[:2] + (3,))
    if channels in (3, 4):
        return image[:, :, :3]
    raise ValueError(f"Cannot save an image of shape {image.shape} as RGB.")


def _to_uint8(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint8:
        return image
    img = np.clip(image.astype(np.float32), 0.0, 1.0)
    return (img * 255.0 + 0.5).astype(np.uint8)


def save_ppm(image: np.ndarray, path: Path) -> None:
    """Save an image to binary PPM (P6) format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _to_uint8(_as_rgb(image))
    height, width, _ = data.shape
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    with path.open("wb") as f:
        f.write(header)
        f.write(np.ascontiguousarray(data).tobytes())


def save_mp4(frames: Iterable[np.ndarray], path: Path, fps: int = 30,
             macro_block_size: int = 1) -> None:
    """Save frames to MP4 if imageio is available."""
    try:
        import imageio
        use_v3 = hasattr(imageio, "v3")
    except Exception:
        print("imageio is not available; skipping mp4 export.")
        return

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    prepared = [_to_uint8(_as_rgb(frame)) for frame in frames]

    if use_v3:
        imageio.v3.imwrite(path, prepared, fps=fps, macro_block_size=macro_block_size)
    else:
        imageio.mimsave(path, prepared, fps=fps, macro_block_size=macro_block_size)
    logger.info("Wrote %d frames to %s", len(prepared), path)


def render_sequence(
    count: int,
    width: int,
    height: int,
    state: StateCell,
    fps: float = 30.0,
    speed: float = 1.0,
    seed: Optional[int] = None,
    config: Optional[SceneConfig] = None,
) -> Iterator[np.ndarray]:
    """
    Drive the render loop offline and yield ``count`` frames as uint8 arrays.

    Auto-advance runs at the interactive rate (0.2 per 30 ms, scaled by
    ``speed``) while the state is playing.
    """
    renderer = SkyRenderer(config, rng=seed)
    host = ManualFrameHost()
    captured: List[np.ndarray] = []

    def present(surface: Surface, info: FrameInfo) -> None:
        captured.append(surface.to_uint8())

    scheduler = FrameScheduler(renderer, state, host, surface=Surface(width, height), present=present)
    frame_ms = 1000.0 / max(1.0, fps)
    step = AUTO_ADVANCE_STEP * speed * frame_ms / ADVANCE_INTERVAL_MS
    scheduler.start()
    try:
        for i in range(count):
            host.step(i * frame_ms)
            while captured:
                yield captured.pop(0)
            state.advance(step)
    finally:
        scheduler.stop()
