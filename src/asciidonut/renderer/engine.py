"""Depth-composited rasterizer and text serializer for the ASCII torus."""

from __future__ import annotations

import logging
import math
import threading
from typing import Iterable, Iterator, List, Optional, Sequence

from .geometry import RotationState, ScreenGeometry
from .kernel import Sample, sample_torus

logger = logging.getLogger(__name__)

GLYPH_RAMP = ".,-~:;=!*#$@"
BLANK = " "


def glyph_for_luminance(luminance: float) -> str:
    """Map a luminance value onto the glyph ramp, clamping to its ends."""
    if not math.isfinite(luminance):
        return GLYPH_RAMP[0]
    index = math.floor(luminance * 8)
    index = max(0, min(len(GLYPH_RAMP) - 1, index))
    return GLYPH_RAMP[index]


class FrameBuffer:
    """Per-cell reciprocal depth and glyph for a single frame.

    A depth of ``0.0`` marks a cell nothing has been drawn into yet; larger
    values are nearer to the viewer.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("FrameBuffer requires width and height >= 1")
        self.width = width
        self.height = height
        size = width * height
        self.depth: List[float] = [0.0] * size
        self.glyphs: List[str] = [BLANK] * size

    @classmethod
    def for_geometry(cls, geometry: ScreenGeometry) -> "FrameBuffer":
        return cls(geometry.width, geometry.height)

    def plot(self, sample: Sample) -> bool:
        """Depth-test ``sample`` into the buffer. Returns True if a cell changed."""
        if not sample.luminance > 0.0:
            return False
        if not math.isfinite(sample.ooz) or sample.ooz <= 0.0:
            return False
        if not (0 <= sample.x < self.width and 0 <= sample.y < self.height):
            return False
        index = sample.x + self.width * sample.y
        if sample.ooz > self.depth[index]:
            self.depth[index] = sample.ooz
            self.glyphs[index] = glyph_for_luminance(sample.luminance)
            return True
        return False

    def glyph_at(self, x: int, y: int) -> str:
        return self.glyphs[x + self.width * y]

    def depth_at(self, x: int, y: int) -> float:
        return self.depth[x + self.width * y]

    def rows(self) -> Iterator[str]:
        for start in range(0, self.width * self.height, self.width):
            yield "".join(self.glyphs[start:start + self.width])

    def is_blank(self) -> bool:
        return all(glyph == BLANK for glyph in self.glyphs)

    def overlay(self, lines: Sequence[str]) -> None:
        """Write status lines right-aligned into the top rows."""
        if not lines:
            return
        max_width = max(len(line) for line in lines)
        start_x = max(0, self.width - max_width - 1)
        for row, line in enumerate(lines):
            if row >= self.height:
                break
            x = start_x
            for char in line:
                if 0 <= x < self.width:
                    self.glyphs[x + self.width * row] = char
                x += 1


def rasterize(samples: Iterable[Sample], geometry: ScreenGeometry) -> FrameBuffer:
    """Composite ``samples`` into a fresh buffer, nearest sample winning per cell."""
    buffer = FrameBuffer.for_geometry(geometry)
    for sample in samples:
        buffer.plot(sample)
    return buffer


def serialize_frame(buffer: FrameBuffer) -> str:
    """Flatten ``buffer`` into text: a line break before each row of glyphs."""
    return "".join("\n" + row for row in buffer.rows())


class RenderEngine:
    """Software renderer producing ASCII frames of the rotating torus."""

    PLACEHOLDER = "Window too small to render the donut.\n"

    def __init__(self, width: int, height: int) -> None:
        self._geometry = ScreenGeometry.for_size(width, height)
        self._degenerate_reported = False
        self._report_lock = threading.Lock()

    @property
    def geometry(self) -> ScreenGeometry:
        return self._geometry

    @property
    def width(self) -> int:
        return self._geometry.width

    @property
    def height(self) -> int:
        return self._geometry.height

    def resize(self, width: int, height: int) -> bool:
        geometry = ScreenGeometry.for_size(width, height)
        if geometry == self._geometry:
            return False
        logger.debug(
            "Geometry %dx%d -> %dx%d (k1=%.3f)",
            self._geometry.width,
            self._geometry.height,
            geometry.width,
            geometry.height,
            geometry.k1,
        )
        self._geometry = geometry
        return True

    def render_buffer(
        self,
        rotation: RotationState,
        geometry: Optional[ScreenGeometry] = None,
    ) -> Optional[FrameBuffer]:
        """Rasterize one frame, or return ``None`` for a degenerate viewport."""
        if geometry is None:
            geometry = self._geometry
        if geometry.is_degenerate:
            self._report_degenerate(geometry)
            return None
        with self._report_lock:
            self._degenerate_reported = False
        return rasterize(sample_torus(rotation, geometry), geometry)

    def render(
        self,
        rotation: RotationState,
        geometry: Optional[ScreenGeometry] = None,
        *,
        hud: Optional[Sequence[str]] = None,
    ) -> str:
        buffer = self.render_buffer(rotation, geometry)
        if buffer is None:
            return self.PLACEHOLDER
        if hud:
            buffer.overlay(hud)
        return serialize_frame(buffer)

    def _report_degenerate(self, geometry: ScreenGeometry) -> None:
        # Renders may run outside the driver lock; check and set together.
        with self._report_lock:
            if self._degenerate_reported:
                return
            self._degenerate_reported = True
        logger.warning(
            "Screen dimensions %dx%d are too small, skipping render",
            geometry.width,
            geometry.height,
        )
