"""Animation and pointer-drag driver for the ASCII torus."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from .renderer.engine import RenderEngine
from .renderer.geometry import RotationState, ScreenGeometry
from .renderer.terminal import InputEvent

logger = logging.getLogger(__name__)

QUIT_KEYS = ("q", "Q")


class DisplaySurface(Protocol):
    def size_tuple(self) -> Tuple[int, int]:
        ...

    def draw(self, frame: str) -> None:
        ...

    def poll_events(self) -> List[InputEvent]:
        ...


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class AnimationDriver:
    """Owns the rotation state and turns ticks and pointer drags into frames.

    Automatic rotation and manual drags add onto the same angles.  All state
    changes and the per-frame snapshot happen under a single lock, so a frame
    never sees a half-applied delta or a width from one resize with the height
    of another.
    """

    def __init__(
        self,
        engine: RenderEngine,
        rotation: Optional[RotationState] = None,
        *,
        delta_a: float = 0.04,
        delta_b: float = 0.02,
        drag_divisor: float = 100.0,
        nudge_step: float = 0.1,
    ) -> None:
        if drag_divisor <= 0:
            raise ValueError("drag_divisor must be positive")
        self._engine = engine
        self._rotation = rotation if rotation is not None else RotationState()
        self._delta_a = delta_a
        self._delta_b = delta_b
        self._drag_divisor = drag_divisor
        self._nudge_step = nudge_step
        self._drag_state = DragState.IDLE
        self._anchor: Tuple[int, int] = (0, 0)
        self._lock = threading.Lock()

    @property
    def drag_state(self) -> DragState:
        return self._drag_state

    @property
    def rotation(self) -> RotationState:
        with self._lock:
            return self._rotation.copy()

    def snapshot(self) -> Tuple[RotationState, ScreenGeometry]:
        with self._lock:
            return self._rotation.copy(), self._engine.geometry

    def resize(self, width: int, height: int) -> bool:
        with self._lock:
            changed = self._engine.resize(width, height)
        if changed:
            logger.info("Screen dimensions: %dx%d chars", width, height)
        return changed

    def press(self, x: int, y: int) -> None:
        with self._lock:
            self._drag_state = DragState.DRAGGING
            self._anchor = (x, y)
        logger.debug("Drag started at (%d, %d)", x, y)

    def move(self, x: int, y: int) -> None:
        with self._lock:
            if self._drag_state is not DragState.DRAGGING:
                return
            last_x, last_y = self._anchor
            # Horizontal drags spin about B, vertical drags about A.
            self._rotation.rotate(
                (y - last_y) / self._drag_divisor,
                (x - last_x) / self._drag_divisor,
            )
            self._anchor = (x, y)

    def release(self) -> None:
        self._end_drag("released")

    def leave(self) -> None:
        self._end_drag("left surface")

    def nudge(self, da: float, db: float) -> None:
        with self._lock:
            self._rotation.rotate(da, db)

    def handle(self, event: InputEvent) -> bool:
        """Apply ``event``. Returns True when it asks the animation to stop."""
        if event.kind == "press":
            self.press(event.x, event.y)
        elif event.kind == "move":
            self.move(event.x, event.y)
        elif event.kind == "release":
            self.release()
        elif event.kind == "leave":
            self.leave()
        elif event.kind == "key":
            if event.key in QUIT_KEYS:
                return True
            step = self._nudge_step
            if event.key == "LEFT":
                self.nudge(0.0, -step)
            elif event.key == "RIGHT":
                self.nudge(0.0, step)
            elif event.key == "UP":
                self.nudge(-step, 0.0)
            elif event.key == "DOWN":
                self.nudge(step, 0.0)
        return False

    def tick(self, hud: Optional[Sequence[str]] = None) -> str:
        """Render the current angles, then advance them by one tick."""
        with self._lock:
            rotation = self._rotation.copy()
            geometry = self._engine.geometry
            self._rotation.rotate(self._delta_a, self._delta_b)
        return self._engine.render(rotation, geometry, hud=hud)

    def run(
        self,
        display: DisplaySurface,
        *,
        interval: float = 0.05,
        frames: int = 0,
        show_fps: bool = False,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Drive ``display`` every ``interval`` seconds. Returns frames drawn."""
        if interval <= 0:
            raise ValueError("interval must be positive")

        frame_counter = 0
        last_frame_start: float | None = None
        smoothed_fps = 1.0 / interval

        while True:
            frame_start = clock()
            if last_frame_start is not None:
                delta = frame_start - last_frame_start
                instantaneous_fps = 1.0 / max(delta, 1e-6)
                smoothed_fps = smoothed_fps * 0.85 + instantaneous_fps * 0.15
            last_frame_start = frame_start

            width, height = display.size_tuple()
            self.resize(width, height)

            quit_requested = False
            for event in display.poll_events():
                if self.handle(event):
                    quit_requested = True
            if quit_requested:
                logger.info("Quit requested after %d frames", frame_counter)
                break

            hud = (f"FPS {smoothed_fps:5.1f}",) if show_fps else None
            display.draw(self.tick(hud=hud))

            frame_counter += 1
            if frames and frame_counter >= frames:
                break

            sleep_time = interval - (clock() - frame_start)
            if sleep_time > 0:
                sleep(sleep_time)
        return frame_counter

    def _end_drag(self, reason: str) -> None:
        with self._lock:
            if self._drag_state is not DragState.DRAGGING:
                return
            self._drag_state = DragState.IDLE
        logger.debug("Drag ended (%s)", reason)
