"""Terminal-based ASCII torus rendering toolkit."""

from .engine import FrameBuffer, RenderEngine, glyph_for_luminance, rasterize, serialize_frame
from .geometry import RotationState, ScreenGeometry
from .kernel import Sample, project_sample, sample_torus
from .terminal import InputEvent, TerminalController

__all__ = [
    "FrameBuffer",
    "RenderEngine",
    "glyph_for_luminance",
    "rasterize",
    "serialize_frame",
    "RotationState",
    "ScreenGeometry",
    "Sample",
    "project_sample",
    "sample_torus",
    "InputEvent",
    "TerminalController",
]
