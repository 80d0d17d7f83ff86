from __future__ import annotations

from collections.abc import Iterator

import numpy as np

from .types import Direction, NpPoints


class Curve:
    """
    One traced streamline: an append-only list of steps, at most `n_steps` long.
    Each step stores (x, y, direction, step_id); step_id is the insertion order.
    """

    def __init__(self, curve_id: int, n_steps: int) -> None:
        if n_steps < 1:
            raise ValueError("n_steps must be >= 1")
        self._curve_id = curve_id
        self._capacity = n_steps
        self._x: list[float] = []
        self._y: list[float] = []
        self._direction: list[Direction] = []
        self._step_id: list[int] = []
        self._frozen = False

    def insert_step(self, x: float, y: float, direction: Direction) -> None:
        if self._frozen:
            raise ValueError(f"curve {self.curve_id} is frozen")
        if len(self._x) >= self._capacity:
            raise ValueError(
                f"curve {self.curve_id} is full ({self._capacity} steps)"
            )
        self._step_id.append(len(self._x))
        self._x.append(x)
        self._y.append(y)
        self._direction.append(Direction(direction))

    @property
    def curve_id(self) -> int:
        return self._curve_id

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def steps_taken(self) -> int:
        return len(self._x)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def x(self) -> tuple[float, ...]:
        return tuple(self._x)

    @property
    def y(self) -> tuple[float, ...]:
        return tuple(self._y)

    @property
    def direction(self) -> tuple[Direction, ...]:
        return tuple(self._direction)

    @property
    def step_id(self) -> tuple[int, ...]:
        return tuple(self._step_id)

    def step(self, i: int) -> tuple[float, float]:
        return self._x[i], self._y[i]

    def points(self) -> NpPoints:
        """(N,2) float64 copy of the step coordinates, in step order."""
        if not self._x:
            return np.zeros((0, 2), dtype=np.float64)
        return np.column_stack(
            [np.asarray(self._x, dtype=np.float64), np.asarray(self._y, dtype=np.float64)]
        )

    def rows(self) -> Iterator[tuple[int, float, float, int, int]]:
        for i in range(len(self._x)):
            yield (
                self.curve_id,
                self._x[i],
                self._y[i],
                int(self._direction[i]),
                self._step_id[i],
            )

    def __len__(self) -> int:
        return len(self._x)

    def __repr__(self) -> str:
        return (
            f"Curve(curve_id={self.curve_id}, steps_taken={self.steps_taken}, "
            f"capacity={self._capacity})"
        )
