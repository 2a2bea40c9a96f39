"""Interactive matplotlib view: sky canvas, time slider, play control and insight panel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging
import time

import numpy as np

from .insight import describe, phase_for
from .raster import Surface
from .scene import FrameInfo, SkyRenderer
from .scheduler import AUTO_ADVANCE_STEP, TIME_MAX, FrameCallback, FrameScheduler, SimulationState, StateCell

logger = logging.getLogger(__name__)

# Preset name -> time of day; the names double as phase names from insight.phase_for.
TIME_PRESETS = {
    "sunrise": 15.0,
    "noon": 50.0,
    "sunset": 85.0,
}
PRESET_LABELS = {
    "sunrise": "Sunrise",
    "noon": "Noon",
    "sunset": "Sunset",
}
PRESET_KEYS = {
    "1": "sunrise",
    "2": "noon",
    "3": "sunset",
}

BACKGROUND = "#020617"
FOREGROUND = "#e2e8f0"
PRESET_IDLE = "#1e293b"
PRESET_ACTIVE = "#f59e0b"


def add_interactive_args(parser) -> None:
    parser.add_argument("--interactive", action="store_true", help="Run interactive view")
    parser.add_argument("--scale", type=float, default=0.6, help="Window size as a fraction of the screen")
    parser.add_argument("--fps", type=float, default=60.0, help="Target FPS")
    parser.add_argument("--width", type=int, default=None, help="Override width")
    parser.add_argument("--height", type=int, default=None, help="Override height")
    parser.add_argument("--speed", type=float, default=1.0, help="Auto-advance speed multiplier")
    parser.add_argument("--time", type=float, default=50.0, help="Initial time of day (0-100)")
    parser.add_argument("--play", action="store_true", help="Start with auto-advance running")
    parser.add_argument("--seed", type=int, default=None, help="Particle field seed")
    parser.add_argument(
        "--preset",
        choices=sorted(TIME_PRESETS, key=TIME_PRESETS.get),
        default=None,
        help="Start at a time of day preset (overrides --time)",
    )


def preset_time(name: Optional[str], default: float) -> float:
    """Time value for a preset name; ``default`` when no preset was chosen."""
    if name is None:
        return default
    try:
        return TIME_PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown preset '{name}'. Available: {', '.join(TIME_PRESETS)}"
        ) from None


def get_screen_size(default: Tuple[int, int] = (1920, 1080)) -> Tuple[int, int]:
    """Primary screen size in pixels, or ``default`` when no display can be queried."""
    try:
        import tkinter as tk
        root = tk.Tk()
    except Exception:
        return default
    try:
        root.withdraw()
        return int(root.winfo_screenwidth()), int(root.winfo_screenheight())
    except Exception:
        return default
    finally:
        root.destroy()


@dataclass
class InteractiveConfig:
    title: str = "Rayleigh Scattering"
    target_fps: float = 60.0
    scale: float = 0.6
    width: Optional[int] = None
    height: Optional[int] = None
    speed: float = 1.0
    time_value: float = 50.0
    playing: bool = False
    seed: Optional[int] = None
    advance_interval_ms: int = 30
    min_render: int = 64

    @classmethod
    def from_args(cls, args, title: Optional[str] = None) -> "InteractiveConfig":
        return cls(
            title=title or "Rayleigh Scattering",
            target_fps=max(1.0, getattr(args, "fps", 60.0)),
            scale=max(0.1, getattr(args, "scale", 0.6)),
            width=getattr(args, "width", None),
            height=getattr(args, "height", None),
            speed=max(0.1, getattr(args, "speed", 1.0)),
            time_value=min(TIME_MAX, max(0.0, preset_time(
                getattr(args, "preset", None), getattr(args, "time", 50.0)
            ))),
            playing=bool(getattr(args, "play", False)),
            seed=getattr(args, "seed", None),
        )

    @property
    def frame_interval_ms(self) -> int:
        return max(1, int(round(1000.0 / self.target_fps)))

    def window_size(self) -> Tuple[int, int]:
        if self.width and self.height:
            width, height = self.width, self.height
        else:
            screen_w, screen_h = get_screen_size()
            width = self.width or int(screen_w * self.scale)
            height = self.height or int(screen_h * self.scale)
        return max(self.min_render, width), max(self.min_render, height)


class MatplotlibFrameHost:
    """Frame host backed by a repeating canvas timer on the GUI thread."""

    def __init__(self, canvas, interval_ms: int):
        self._timer = canvas.new_timer(interval=interval_ms)
        self._timer.add_callback(self._fire)
        self._callback: Optional[FrameCallback] = None
        self._handle = 0
        self._active = False
        self._origin = time.perf_counter()

    def request_frame(self, callback: FrameCallback) -> int:
        self._handle += 1
        self._callback = callback
        if not self._active:
            self._active = True
            self._timer.start()
        return self._handle

    def cancel_frame(self, handle: int) -> None:
        if handle != self._handle or self._callback is None:
            return
        self._callback = None
        self._active = False
        self._timer.stop()

    def _fire(self) -> None:
        callback, self._callback = self._callback, None
        if callback is None:
            return
        callback((time.perf_counter() - self._origin) * 1000.0)
        if self._callback is None and self._active:
            # The callback ended the loop without asking for another frame.
            self._active = False
            self._timer.stop()


class SkyView:
    """Figure hosting the render loop and its controls."""

    def __init__(self, config: InteractiveConfig, state: Optional[StateCell] = None):
        import matplotlib.pyplot as plt
        from matplotlib.widgets import Button, Slider

        self.config = config
        self.state = state or StateCell(SimulationState(config.time_value, config.playing))
        self._syncing = False
        self._panel_key: Optional[str] = None
        self._shown_size: Optional[Tuple[int, int]] = None

        width, height = config.window_size()
        self.fig = plt.figure(facecolor=BACKGROUND)
        dpi = self.fig.get_dpi()
        self.fig.set_size_inches(width / dpi, height / dpi)
        try:
            self.fig.canvas.manager.set_window_title(config.title)
        except Exception:
            pass

        self.ax = self.fig.add_axes([0.01, 0.14, 0.66, 0.84])
        self.ax.axis("off")
        self.image = self.ax.imshow(
            np.zeros((1, 1, 3), dtype=np.uint8), aspect="auto", interpolation="nearest"
        )

        self.info_ax = self.fig.add_axes([0.70, 0.14, 0.29, 0.84])
        self.info_ax.axis("off")
        self.info_text = self.info_ax.text(
            0.0, 1.0, "", va="top", ha="left", wrap=True, fontsize=9,
            color=FOREGROUND, transform=self.info_ax.transAxes,
        )

        slider_ax = self.fig.add_axes([0.16, 0.05, 0.50, 0.04], facecolor="#334155")
        self.slider = Slider(
            slider_ax, "Time", 0.0, TIME_MAX, valinit=self.state.time_value, valstep=1, valfmt="%.0f"
        )
        self.slider.label.set_color(FOREGROUND)
        self.slider.valtext.set_color(FOREGROUND)
        self.slider.on_changed(self._on_slider)

        button_ax = self.fig.add_axes([0.02, 0.04, 0.09, 0.06])
        self.button = Button(button_ax, "Play", color="#2563eb", hovercolor="#3b82f6")
        self.button.label.set_color("white")
        self.button.on_clicked(self._on_toggle)

        self.preset_buttons: Dict[str, Button] = {}
        for i, name in enumerate(TIME_PRESETS):
            preset_ax = self.fig.add_axes([0.70 + i * 0.097, 0.04, 0.09, 0.06])
            preset = Button(preset_ax, PRESET_LABELS[name], color=PRESET_IDLE, hovercolor="#334155")
            preset.label.set_color(FOREGROUND)
            preset.on_clicked(lambda event, value=TIME_PRESETS[name]: self.set_time(value))
            self.preset_buttons[name] = preset
        self._active_phase: Optional[str] = None

        self.renderer = SkyRenderer(rng=config.seed)
        self.host = MatplotlibFrameHost(self.fig.canvas, config.frame_interval_ms)
        self.scheduler = FrameScheduler(
            self.renderer, self.state, self.host, surface=Surface(), present=self._present
        )

        self._advance_timer = self.fig.canvas.new_timer(interval=config.advance_interval_ms)
        self._advance_timer.add_callback(self._on_advance)

        self.fig.canvas.mpl_connect("resize_event", self._on_resize)
        self.fig.canvas.mpl_connect("close_event", self._on_close)
        self.fig.canvas.mpl_connect("key_press_event", self._on_key)

        self.fit_surface()
        self._sync_controls()

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------

    def set_time(self, value: float) -> None:
        self.state.update(time_value=min(TIME_MAX, max(0.0, float(value))), is_playing=False)
        self._sync_controls()

    def set_playing(self, playing: bool) -> None:
        self.state.update(is_playing=bool(playing))
        self._sync_controls()

    def _sync_controls(self) -> None:
        current = self.state.get()
        self._syncing = True
        try:
            if self.slider.val != current.time_value:
                self.slider.set_val(current.time_value)
        finally:
            self._syncing = False
        self.button.label.set_text("Pause" if current.is_playing else "Play")
        if current.is_playing:
            self._advance_timer.start()
        else:
            self._advance_timer.stop()
        self._update_panel(current.time_value)
        self._highlight_phase(phase_for(current.time_value))

    def _highlight_phase(self, phase: str) -> None:
        if phase == self._active_phase:
            return
        self._active_phase = phase
        for name, preset in self.preset_buttons.items():
            color = PRESET_ACTIVE if name == phase else PRESET_IDLE
            # Button restores ``color`` when the pointer leaves it.
            preset.color = color
            preset.ax.set_facecolor(color)
            preset.label.set_color(BACKGROUND if name == phase else FOREGROUND)

    def _update_panel(self, time_value: float) -> None:
        insight = describe(time_value)
        key = insight.title + insight.path_label + insight.scattered_light
        if key == self._panel_key:
            return
        self._panel_key = key
        self.info_text.set_text(insight.as_text())

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_slider(self, value) -> None:
        if self._syncing:
            return
        self.set_time(value)

    def _on_toggle(self, event) -> None:
        self.set_playing(not self.state.is_playing)

    def _on_key(self, event) -> None:
        if event.key in PRESET_KEYS:
            self.set_time(TIME_PRESETS[PRESET_KEYS[event.key]])
        elif event.key == " ":
            self.set_playing(not self.state.is_playing)

    def _on_advance(self) -> None:
        if not self.state.is_playing:
            return
        self.state.advance(AUTO_ADVANCE_STEP * self.config.speed)
        self._sync_controls()

    def _on_resize(self, event) -> None:
        self.fit_surface()

    def _on_close(self, event) -> None:
        self._advance_timer.stop()
        self.scheduler.detach_surface()
        self.scheduler.stop()

    def fit_surface(self) -> None:
        """Match the backing buffer to the image axes' size in device pixels."""
        bbox = self.ax.get_window_extent()
        self.scheduler.resize(max(0, int(round(bbox.width))), max(0, int(round(bbox.height))))

    def _present(self, surface: Surface, info: FrameInfo) -> None:
        self.image.set_data(surface.to_uint8())
        if self._shown_size != surface.size:
            self._shown_size = surface.size
            self.image.set_extent((0, surface.width, surface.height, 0))
        self.fig.canvas.draw_idle()

    def show(self) -> None:
        import matplotlib.pyplot as plt

        self.scheduler.start()
        plt.show(block=True)


def run_interactive(config: InteractiveConfig) -> None:
    try:
        import matplotlib.pyplot  # noqa: F401
    except Exception:
        print("matplotlib is not available; cannot display interactive output.")
        return

    view = SkyView(config)
    logger.info("Opening %s at time %.1f", config.title, view.state.time_value)
    view.show()
