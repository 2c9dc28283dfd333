"""Interactive entry point for the ASCII donut renderer."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .driver import AnimationDriver
from .renderer.engine import RenderEngine
from .renderer.geometry import RotationState
from .renderer.terminal import TerminalController


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Spinning ASCII donut for your terminal")
    parser.add_argument(
        "--interval",
        type=float,
        default=50.0,
        help="Milliseconds between frames (default: 50)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=0,
        help="Run for a fixed number of frames (0 = infinite)",
    )
    parser.add_argument("--width", type=int, default=None, help="Fixed grid width in characters")
    parser.add_argument("--height", type=int, default=None, help="Fixed grid height in characters")
    parser.add_argument(
        "--delta-a",
        type=float,
        default=0.04,
        help="Rotation about the A axis per frame in radians (default: 0.04)",
    )
    parser.add_argument(
        "--delta-b",
        type=float,
        default=0.02,
        help="Rotation about the B axis per frame in radians (default: 0.02)",
    )
    parser.add_argument(
        "--sensitivity",
        type=float,
        default=100.0,
        help="Pointer cells per radian of drag rotation (default: 100)",
    )
    parser.add_argument(
        "--no-mouse",
        action="store_true",
        help="Do not enable terminal mouse reporting",
    )
    parser.add_argument(
        "--fps",
        action="store_true",
        help="Show a frames-per-second readout in the top-right corner",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Print a single frame to stdout and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )
    parser.add_argument(
        "-vv",
        "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )
    parser.add_argument("--log-file", type=str, default=None, help="Write log records to this file")
    args = parser.parse_args(argv)

    if args.interval <= 0:
        parser.error("--interval must be positive")
    if args.sensitivity <= 0:
        parser.error("--sensitivity must be positive")
    if args.frames < 0:
        parser.error("--frames must not be negative")
    if (args.width is None) != (args.height is None):
        parser.error("--width and --height must be given together")
    return args


def setup_logging(verbose: bool = False, debug: bool = False, log_file: Optional[str] = None) -> None:
    """
    Sets up the logging configuration.
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", filename=log_file)


@dataclass
class RuntimeConfig:
    warnings: list[str]
    interval: float
    frames: int
    fixed_size: Optional[Tuple[int, int]]
    delta_a: float
    delta_b: float
    drag_divisor: float
    mouse: bool
    show_fps: bool
    once: bool


def _setup_runtime(args: argparse.Namespace) -> RuntimeConfig:
    warnings: list[str] = []

    fixed_size: Optional[Tuple[int, int]] = None
    if args.width is not None and args.height is not None:
        fixed_size = (args.width, args.height)
        if args.width <= 0 or args.height <= 0:
            warnings.append(f"Grid size {args.width}x{args.height} is empty; nothing will be drawn")

    interval = args.interval / 1000.0
    if interval < 0.01:
        warnings.append(f"Interval of {args.interval:g} ms is shorter than a frame usually takes")

    mouse = not args.no_mouse
    if mouse and not args.once and not sys.stdin.isatty():
        warnings.append("stdin is not a terminal; pointer dragging disabled")
        mouse = False

    return RuntimeConfig(
        warnings=warnings,
        interval=interval,
        frames=args.frames,
        fixed_size=fixed_size,
        delta_a=args.delta_a,
        delta_b=args.delta_b,
        drag_divisor=args.sensitivity,
        mouse=mouse,
        show_fps=args.fps,
        once=args.once,
    )


def _emit_warnings(warnings: Sequence[str]) -> None:
    if not warnings:
        return
    for warning in warnings:
        sys.stderr.write(f"[donut] {warning}\n")
    sys.stderr.flush()


def _create_driver(width: int, height: int, config: RuntimeConfig) -> AnimationDriver:
    engine = RenderEngine(width, height)
    return AnimationDriver(
        engine,
        RotationState(),
        delta_a=config.delta_a,
        delta_b=config.delta_b,
        drag_divisor=config.drag_divisor,
    )


def _print_single_frame(config: RuntimeConfig) -> None:
    controller = TerminalController(fixed_size=config.fixed_size)
    width, height = controller.size_tuple()
    driver = _create_driver(width, height, config)
    sys.stdout.write(driver.tick())
    sys.stdout.write("\n")
    sys.stdout.flush()


def _run_loop(config: RuntimeConfig) -> None:
    controller = TerminalController(mouse=config.mouse, fixed_size=config.fixed_size)
    with controller as terminal:
        width, height = terminal.size_tuple()
        driver = _create_driver(width, height, config)
        try:
            frames = driver.run(
                terminal,
                interval=config.interval,
                frames=config.frames,
                show_fps=config.show_fps,
            )
            logging.info("Rendered %d frames", frames)
        except KeyboardInterrupt:  # pragma: no cover - interactive loop
            controller.restore()
            sys.stdout.write("\nInterrupted. Bye!\n")
            sys.stdout.flush()


def run(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_arguments(argv)
    setup_logging(verbose=args.verbose, debug=args.debug, log_file=args.log_file)
    config = _setup_runtime(args)
    _emit_warnings(config.warnings)

    if config.once:
        _print_single_frame(config)
    else:
        _run_loop(config)


def main() -> None:
    run()


if __name__ == "__main__":
    main()
