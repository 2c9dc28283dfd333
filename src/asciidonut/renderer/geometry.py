"""Torus constants, rotation state and screen geometry."""

from __future__ import annotations

from dataclasses import dataclass

# Tube radius, ring radius and camera distance of the rendered torus.
R1 = 1.0
R2 = 2.0
K2 = 5.0


def projection_scale(width: int) -> float:
    """Scale factor K1 that makes the torus fill ``width`` character cells."""
    return width * K2 * 3.0 / (8.0 * (R1 + R2))


@dataclass(slots=True)
class RotationState:
    """Rotation angles (radians) about the two torus axes."""

    a: float = 0.0
    b: float = 0.0

    def rotate(self, da: float, db: float) -> None:
        self.a += da
        self.b += db

    def copy(self) -> "RotationState":
        return RotationState(self.a, self.b)


@dataclass(frozen=True, slots=True)
class ScreenGeometry:
    """Character grid size together with the projection scale derived from it.

    Instances are immutable; a resize replaces the whole geometry so that
    width, height and ``k1`` always belong together.
    """

    width: int
    height: int
    k1: float

    @classmethod
    def for_size(cls, width: int, height: int) -> "ScreenGeometry":
        width = int(width)
        height = int(height)
        return cls(width, height, projection_scale(width))

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def cell_count(self) -> int:
        if self.is_degenerate:
            return 0
        return self.width * self.height
