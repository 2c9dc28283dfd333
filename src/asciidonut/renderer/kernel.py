"""Surface sampling and projection for the rotating torus.

The torus is swept by two angles: ``theta`` walks around the tube's cross
section and ``phi`` spins that circle around the ring.  Every sample is
rotated by the two view angles (A about the x axis, B about the z axis),
perspective-projected onto the character grid and lit by a fixed directional
light folded into the luminance formula.
"""

from __future__ import annotations

import math
from typing import Iterator, List, NamedTuple, Optional, Tuple

from .geometry import K2, R1, R2, RotationState, ScreenGeometry

THETA_STEP = 0.07
PHI_STEP = 0.02


class Sample(NamedTuple):
    """A projected surface point: grid cell, reciprocal depth and luminance."""

    x: int
    y: int
    ooz: float
    luminance: float


def _grid(step: float) -> List[float]:
    # Built from the index so that no rounding error accumulates over the sweep.
    values: List[float] = []
    index = 0
    while index * step < math.tau:
        values.append(index * step)
        index += 1
    return values


def _trig_table(angles: List[float]) -> Tuple[Tuple[float, float], ...]:
    return tuple((math.cos(angle), math.sin(angle)) for angle in angles)


THETA_VALUES = tuple(_grid(THETA_STEP))
PHI_VALUES = tuple(_grid(PHI_STEP))
THETA_TABLE = _trig_table(list(THETA_VALUES))
PHI_TABLE = _trig_table(list(PHI_VALUES))


def samples_per_frame() -> int:
    return len(THETA_TABLE) * len(PHI_TABLE)


def _project(
    geometry: ScreenGeometry,
    cos_a: float,
    sin_a: float,
    cos_b: float,
    sin_b: float,
    cos_theta: float,
    sin_theta: float,
    cos_phi: float,
    sin_phi: float,
) -> Optional[Sample]:
    luminance = (
        cos_phi * cos_theta * sin_b
        - cos_a * cos_theta * sin_phi
        - sin_a * sin_theta
        + cos_b * (cos_a * sin_theta - cos_theta * sin_a * sin_phi)
    )
    # Also rejects NaN.
    if not luminance > 0.0:
        return None

    circle_x = R2 + R1 * cos_theta
    circle_y = R1 * sin_theta

    z = K2 + cos_a * circle_x * sin_phi + circle_y * sin_a
    if not z > 0.0:
        return None
    ooz = 1.0 / z

    x = circle_x * (cos_b * cos_phi + sin_a * sin_b * sin_phi) - circle_y * cos_a * sin_b
    y = circle_x * (sin_b * cos_phi - sin_a * cos_b * sin_phi) + circle_y * cos_a * cos_b

    screen_x = geometry.width / 2 + geometry.k1 * ooz * x
    screen_y = geometry.height / 2 - geometry.k1 * ooz * y
    if not (math.isfinite(screen_x) and math.isfinite(screen_y) and math.isfinite(ooz)):
        return None
    return Sample(math.floor(screen_x), math.floor(screen_y), ooz, luminance)


def project_sample(
    rotation: RotationState,
    geometry: ScreenGeometry,
    theta: float,
    phi: float,
) -> Optional[Sample]:
    """Project the surface point at ``(theta, phi)``.

    Returns ``None`` when the point faces away from the light or cannot be
    placed in front of the camera.  The returned cell may lie outside the
    grid; clipping is left to the rasterizer.
    """
    return _project(
        geometry,
        math.cos(rotation.a),
        math.sin(rotation.a),
        math.cos(rotation.b),
        math.sin(rotation.b),
        math.cos(theta),
        math.sin(theta),
        math.cos(phi),
        math.sin(phi),
    )


def sample_torus(rotation: RotationState, geometry: ScreenGeometry) -> Iterator[Sample]:
    """Yield every lit sample of the torus for one frame."""
    cos_a, sin_a = math.cos(rotation.a), math.sin(rotation.a)
    cos_b, sin_b = math.cos(rotation.b), math.sin(rotation.b)
    for cos_theta, sin_theta in THETA_TABLE:
        for cos_phi, sin_phi in PHI_TABLE:
            sample = _project(
                geometry,
                cos_a,
                sin_a,
                cos_b,
                sin_b,
                cos_theta,
                sin_theta,
                cos_phi,
                sin_phi,
            )
            if sample is not None:
                yield sample
