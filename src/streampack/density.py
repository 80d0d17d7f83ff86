from __future__ import annotations

import math
from typing import Literal

from ..utils import debug, debug_helpers
from .curve import Curve
from .field import FlowField

CapacityPolicy = Literal["drop", "grow"]

# Shrink applied to d_sep before comparing distances; absorbs float error for
# points sitting exactly one separation apart.
D_TEST_FACTOR = 0.99


class DensityGrid:
    """
    Uniform grid hash over cells of side `d_sep`, used to reject points that
    come closer than `d_sep` to anything already accepted.

    Grid size is floor(field_width / d_sep) x floor(field_height / d_sep).
    Column 0 and row 0 are never used: a point whose cell falls there (or past
    the far edge) is out of bounds, is never stored, and is never valid.

    Each cell keeps at most `cell_capacity - 1` points under the "drop" policy;
    further points are counted in `dropped` and forgotten. "grow" keeps all.
    """

    def __init__(
        self,
        field_width: float,
        field_height: float,
        d_sep: float,
        cell_capacity: int,
        capacity_policy: CapacityPolicy = "drop",
    ) -> None:
        if not math.isfinite(d_sep) or d_sep <= 0:
            raise ValueError("d_sep must be finite and > 0")
        if cell_capacity < 1:
            raise ValueError("cell_capacity must be >= 1")
        if capacity_policy not in ("drop", "grow"):
            raise ValueError(f"unknown capacity_policy: {capacity_policy!r}")
        width = int(field_width / d_sep)
        height = int(field_height / d_sep)
        if width < 1 or height < 1:
            raise ValueError(
                f"field {field_width}x{field_height} is smaller than one cell of {d_sep}"
            )

        self._d_sep = float(d_sep)
        self._d_test = self._d_sep * D_TEST_FACTOR
        self._width = width
        self._height = height
        self._capacity = cell_capacity
        self._policy: CapacityPolicy = capacity_policy
        self._cells_x: list[list[float]] = [[] for _ in range(width * height)]
        self._cells_y: list[list[float]] = [[] for _ in range(width * height)]
        self._n_points = 0
        self.dropped = 0
        debug.log(
            f"density_grid: cells={width}x{height} d_sep={self._d_sep:.6g} "
            f"capacity={cell_capacity} policy={capacity_policy}"
        )

    @classmethod
    def for_field(
        cls,
        field: FlowField,
        d_sep: float,
        cell_capacity: int,
        capacity_policy: CapacityPolicy = "drop",
    ) -> DensityGrid:
        return cls(field.width, field.width, d_sep, cell_capacity, capacity_policy)

    @property
    def d_sep(self) -> float:
        return self._d_sep

    @property
    def d_test(self) -> float:
        return self._d_test

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def cell_capacity(self) -> int:
        return self._capacity

    @property
    def capacity_policy(self) -> CapacityPolicy:
        return self._policy

    def col(self, x: float) -> int:
        return math.floor(x / self._d_sep)

    def row(self, y: float) -> int:
        return math.floor(y / self._d_sep)

    def index(self, col: int, row: int) -> int:
        return col + row * self._width

    def in_bounds(self, x: float, y: float) -> bool:
        c = self.col(x)
        r = self.row(y)
        return 0 < c < self._width and 0 < r < self._height

    def occupancy(self, x: float, y: float) -> int:
        if not self.in_bounds(x, y):
            return 0
        return len(self._cells_x[self.index(self.col(x), self.row(y))])

    def near_capacity(self, x: float, y: float) -> bool:
        if self._policy == "grow" or not self.in_bounds(x, y):
            return False
        return self.occupancy(x, y) + 1 >= self._capacity

    def insert_coord(self, x: float, y: float) -> None:
        if not self.in_bounds(x, y):
            return
        i = self.index(self.col(x), self.row(y))
        cell_x = self._cells_x[i]
        if self._policy == "drop" and len(cell_x) + 1 >= self._capacity:
            self.dropped += 1
            debug_helpers.log_once(
                f"density_drop_{id(self)}",
                f"density_grid: cell {i} full at {len(cell_x)} points; "
                "dropping, separation is no longer guaranteed there",
            )
            return
        cell_x.append(x)
        self._cells_y[i].append(y)
        self._n_points += 1

    def insert_curve_coords(self, curve: Curve) -> None:
        for i in range(curve.steps_taken):
            x, y = curve.step(i)
            self.insert_coord(x, y)

    def is_valid_next_step(self, x: float, y: float) -> bool:
        """True if (x, y) is in bounds and farther than d_sep*0.99 from every stored point."""
        if not self.in_bounds(x, y):
            return False

        c = self.col(x)
        r = self.row(y)
        start_col = max(c - 1, 0)
        end_col = min(c + 1, self._width - 1)
        start_row = max(r - 1, 0)
        end_row = min(r + 1, self._height - 1)

        d_test = self._d_test
        for cc in range(start_col, end_col + 1):
            for rr in range(start_row, end_row + 1):
                i = self.index(cc, rr)
                cell_x = self._cells_x[i]
                if not cell_x:
                    continue
                cell_y = self._cells_y[i]
                for x2, y2 in zip(cell_x, cell_y):
                    if math.hypot(x - x2, y - y2) <= d_test:
                        return False
        return True

    def __len__(self) -> int:
        return self._n_points
