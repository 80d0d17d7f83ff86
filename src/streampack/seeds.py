from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from typing import Protocol

from .curve import Curve
from .types import Point


def collect_seedpoints(curve: Curve, d_sep: float) -> list[Point]:
    """
    Candidate seeds at distance `d_sep` on both sides of `curve`.

    For every step but the last, the local tangent points from step i to
    step i+1; the left (+90 deg) then right (-90 deg) offsets of step i are
    emitted. Nothing is filtered here.
    """
    seeds: list[Point] = []
    xs = curve.x
    ys = curve.y
    for i in range(curve.steps_taken - 1):
        x = xs[i]
        y = ys[i]
        angle = math.atan2(ys[i + 1] - y, xs[i + 1] - x)
        left = angle + math.pi / 2
        right = angle - math.pi / 2
        seeds.append(Point(x + d_sep * math.cos(left), y + d_sep * math.sin(left)))
        seeds.append(Point(x + d_sep * math.cos(right), y + d_sep * math.sin(right)))
    return seeds


class SeedSource(Protocol):
    def candidates(self, accepted: Sequence[Curve]) -> Iterator[Point]:
        """Yield seed points lazily; `accepted` may grow while this is consumed."""
        ...


class ExpansionSeeds:
    """Seeds from the offsets of accepted curves, one curve at a time, in acceptance order."""

    def __init__(self, d_sep: float) -> None:
        self.d_sep = d_sep

    def candidates(self, accepted: Sequence[Curve]) -> Iterator[Point]:
        cursor = 0
        while cursor < len(accepted):
            yield from collect_seedpoints(accepted[cursor], self.d_sep)
            cursor += 1


class PointSeeds:
    """A fixed list of seeds, yielded in the order given."""

    def __init__(self, points: Iterable[tuple[float, float]]) -> None:
        self.points = [Point(float(x), float(y)) for x, y in points]

    def candidates(self, accepted: Sequence[Curve]) -> Iterator[Point]:
        yield from self.points

    def __len__(self) -> int:
        return len(self.points)
