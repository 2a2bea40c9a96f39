# skyscatter/scheduler.py
"""
Render loop lifecycle: shared simulation state, frame hosts and the scheduler
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Protocol

from .raster import Surface
from .scene import FrameInfo, SkyRenderer

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]
PresentCallback = Callable[[Surface, FrameInfo], None]

AUTO_ADVANCE_STEP = 0.2
TIME_MAX = 100.0


@dataclass(frozen=True)
class SimulationState:
    time_value: float = 50.0
    is_playing: bool = False


class StateCell:
    """
    Reference cell holding the latest simulation state.

    Writers replace the value synchronously; the render loop reads it once per
    frame, so a change is visible to the very next frame.
    """

    def __init__(self, initial: Optional[SimulationState] = None):
        self._value = initial or SimulationState()

    def get(self) -> SimulationState:
        return self._value

    @property
    def time_value(self) -> float:
        return self._value.time_value

    @property
    def is_playing(self) -> bool:
        return self._value.is_playing

    def update(self, **changes) -> SimulationState:
        self._value = replace(self._value, **changes)
        return self._value

    def advance(self, step: float = AUTO_ADVANCE_STEP) -> SimulationState:
        """Auto-advance tick: move time forward while playing, looping to 0 at the end."""
        if not self._value.is_playing:
            return self._value
        next_value = self._value.time_value + step
        if next_value >= TIME_MAX:
            next_value = 0.0
        return self.update(time_value=next_value)


class FrameHost(Protocol):
    """Source of display-driven frame callbacks."""

    def request_frame(self, callback: FrameCallback) -> int: ...

    def cancel_frame(self, handle: int) -> None: ...


class ManualFrameHost:
    """Frame host driven by explicit ``step`` calls (offline rendering, tests)."""

    def __init__(self):
        self._pending: Dict[int, FrameCallback] = {}
        self._next_handle = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        self._next_handle += 1
        self._pending[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def step(self, timestamp_ms: float) -> int:
        """Run every callback requested before this call; returns how many ran."""
        callbacks = list(self._pending.values())
        self._pending.clear()
        for callback in callbacks:
            callback(timestamp_ms)
        return len(callbacks)


class FrameScheduler:
    """
    Self-rescheduling render loop.

    The loop is started once for the scheduler's lifetime. Every frame reads
    the current state from the cell, renders into the surface when it has
    area, hands the result to ``present`` and requests the next frame.
    """

    def __init__(self, renderer: SkyRenderer, state: StateCell, host: FrameHost,
                 surface: Optional[Surface] = None,
                 present: Optional[PresentCallback] = None):
        self.renderer = renderer
        self.state = state
        self.host = host
        self._surface: Optional[Surface] = surface if surface is not None else Surface()
        self._present = present
        self._handle: Optional[int] = None
        self._started = False
        self._running = False
        self._last_timestamp: Optional[float] = None
        self.frame_ms: Optional[float] = None
        self.frames_rendered = 0
        self.last_frame: Optional[FrameInfo] = None

    @property
    def surface(self) -> Optional[Surface]:
        return self._surface

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._running = True
        logger.debug("Render loop started")
        self._request()

    def stop(self) -> None:
        """Withdraw the pending frame request. Safe to call repeatedly."""
        if self._handle is not None:
            self.host.cancel_frame(self._handle)
            self._handle = None
        if self._running:
            self._running = False
            logger.debug("Render loop stopped after %d frames", self.frames_rendered)

    def resize(self, width: int, height: int) -> None:
        surface = self._surface
        if surface is None:
            return
        if surface.resize(width, height):
            logger.debug("Surface resized to %dx%d", width, height)

    def detach_surface(self) -> None:
        """Drop the drawing surface; the loop ends at its next frame."""
        if self._surface is not None:
            logger.info("Drawing surface released")
        self._surface = None

    def tick(self, timestamp_ms: float) -> None:
        """Frame callback: ``timestamp_ms`` is the elapsed time in milliseconds."""
        self._handle = None
        if not self._running:
            return
        surface = self._surface
        if surface is None:
            logger.info("No drawing surface, render loop ends")
            self._running = False
            return

        self._track(timestamp_ms)
        state = self.state.get()
        info = self.renderer.render(surface, state.time_value, timestamp_ms)
        if info is not None:
            self.frames_rendered += 1
            self.last_frame = info
            if self._present is not None:
                self._present(surface, info)
        self._request()

    def _request(self) -> None:
        self._handle = self.host.request_frame(self.tick)

    def _track(self, timestamp_ms: float) -> None:
        if self._last_timestamp is not None:
            dt_ms = timestamp_ms - self._last_timestamp
            if self.frame_ms is None:
                self.frame_ms = dt_ms
            else:
                self.frame_ms = self.frame_ms * 0.9 + dt_ms * 0.1
        self._last_timestamp = timestamp_ms
