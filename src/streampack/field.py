from __future__ import annotations

import math

import numpy as np
from beartype import beartype
from beartype.typing import Callable
from jaxtyping import jaxtyped

from ..utils import debug_helpers
from .types import NpAngleGrid, NpVectorComponent


class FlowField:
    """Read-only square grid of flow directions, in radians.

    `angles[row, col]` is the direction used for every point with
    `col <= x < col + 1` and `row <= y < row + 1`. The field has a single
    `width`; height is not stored separately because the grid must be square.
    """

    @jaxtyped(typechecker=beartype)
    def __init__(self, angles: NpAngleGrid) -> None:
        A = np.array(angles, dtype=np.float64)
        if A.ndim != 2:
            raise ValueError("angles must have shape (W,W)")
        if A.shape[0] != A.shape[1]:
            raise ValueError(f"flow field must be square, got shape {A.shape}")
        if A.shape[0] == 0:
            raise ValueError("flow field must not be empty")
        if not np.isfinite(A).all():
            raise ValueError("flow field contains non-finite angles")
        A.setflags(write=False)
        self._angles = A
        self._rows: list[list[float]] = A.tolist()
        self._width = int(A.shape[0])
        debug_helpers.log_angles("flow_field", A)

    @property
    def width(self) -> int:
        return self._width

    @property
    def shape(self) -> tuple[int, int]:
        return (self._width, self._width)

    @property
    def angles(self) -> NpAngleGrid:
        return self._angles

    def in_bounds(self, x: float, y: float) -> bool:
        return 0 < x < self._width and 0 < y < self._width

    def angle_at(self, x: float, y: float) -> float:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) is outside the flow field")
        return self._rows[int(y)][int(x)]


@jaxtyped(typechecker=beartype)
def angle_grid_from_vectors(u: NpVectorComponent, v: NpVectorComponent) -> NpAngleGrid:
    """Direction of a sampled velocity field, `atan2(v, u)` per cell."""
    return np.arctan2(v, u).astype(np.float64)


def angle_grid_from_function(
    width: int,
    fn: Callable[[float, float], float],
) -> NpAngleGrid:
    """Sample `fn(x, y)` at the integer corner of every cell."""
    if width < 1:
        raise ValueError("width must be >= 1")
    grid = np.zeros((width, width), dtype=np.float64)
    for row in range(width):
        for col in range(width):
            grid[row, col] = float(fn(float(col), float(row)))
    return grid


@jaxtyped(typechecker=beartype)
def harmonic_angle_grid(
    width: int,
    rng: np.random.Generator,
    n_waves: int = 4,
    frequency: float = 0.05,
) -> NpAngleGrid:
    """
    Smooth pseudo-random field: a few plane waves with random heading and phase.
    Values land in [-pi, pi]. Same generator state -> same grid.
    """
    if width < 1:
        raise ValueError("width must be >= 1")
    if n_waves < 1:
        raise ValueError("n_waves must be >= 1")
    if not np.isfinite(frequency) or frequency <= 0:
        raise ValueError("frequency must be finite and > 0")

    ys, xs = np.mgrid[0:width, 0:width].astype(np.float64)
    total = np.zeros((width, width), dtype=np.float64)
    for _ in range(n_waves):
        heading = float(rng.random()) * (2.0 * math.pi)
        k = frequency * (0.5 + float(rng.random()))
        phase = float(rng.random()) * (2.0 * math.pi)
        total += np.sin(k * (xs * math.cos(heading) + ys * math.sin(heading)) + phase)
    return (total / n_waves) * math.pi


def perlin_angle_grid(
    width: int,
    frequency: float = 0.01,
    seed: int = 0,
    octaves: int = 1,
) -> NpAngleGrid:
    """
    Perlin noise in [-1, 1] scaled to a full turn either way (`noise * 2*pi`).
    Needs the optional `noise` package.
    """
    from noise import pnoise2  # type: ignore[reportMissingTypeStubs]

    if width < 1:
        raise ValueError("width must be >= 1")
    if not np.isfinite(frequency) or frequency <= 0:
        raise ValueError("frequency must be finite and > 0")
    if octaves < 1:
        raise ValueError("octaves must be >= 1")

    grid = np.zeros((width, width), dtype=np.float64)
    for row in range(width):
        for col in range(width):
            grid[row, col] = pnoise2(
                col * frequency, row * frequency, octaves=octaves, base=seed
            )
    return grid * (2.0 * math.pi)
