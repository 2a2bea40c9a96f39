"""CLI for the Rayleigh scattering sky view."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .interactive import InteractiveConfig, add_interactive_args, run_interactive
from .logging_config import setup_logging
from .output import render_sequence, save_mp4, save_ppm
from .scheduler import SimulationState, StateCell

DEFAULT_SIZE = (800, 600)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rayleigh scattering sky")
    add_interactive_args(parser)
    parser.add_argument("--no-interactive", action="store_true", help="Render to a file instead of a window")
    parser.add_argument("--output", type=Path, default=Path("output") / "sky.ppm", help="Still image path (PPM)")
    parser.add_argument("--video", type=Path, default=None, help="Render an MP4 sequence to this path")
    parser.add_argument("--frames", type=int, default=150, help="Frames in the video sequence")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    try:
        config = InteractiveConfig.from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    interactive = True
    if args.no_interactive or args.video is not None:
        interactive = False
    if args.interactive:
        interactive = True

    if interactive:
        run_interactive(config)
        return

    width = config.width or DEFAULT_SIZE[0]
    height = config.height or DEFAULT_SIZE[1]
    state = StateCell(SimulationState(config.time_value, config.playing))

    if args.video is not None:
        frames = render_sequence(
            max(1, args.frames), width, height, state,
            fps=config.target_fps, speed=config.speed, seed=config.seed,
        )
        save_mp4(frames, args.video, fps=int(round(config.target_fps)))
        return

    frame = next(render_sequence(1, width, height, state, seed=config.seed))
    save_ppm(frame, args.output)
    print(f"Saved {args.output} ({width}x{height}, time {config.time_value:g})")


if __name__ == "__main__":
    main()
