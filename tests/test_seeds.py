import pytest

from src.streampack.curve import Curve
from src.streampack.seeds import ExpansionSeeds, PointSeeds, collect_seedpoints
from src.streampack.types import Direction, Point


def _horizontal_curve(curve_id: int, y: float, xs: list[float]) -> Curve:
    c = Curve(curve_id, n_steps=len(xs))
    for x in xs:
        c.insert_step(x, y, Direction.FORWARD)
    return c


def test_seeds_are_offset_left_then_right() -> None:
    c = _horizontal_curve(0, 5.0, [2.0, 3.0, 4.0])
    seeds = collect_seedpoints(c, 1.5)
    assert len(seeds) == 4
    expected = [(2.0, 6.5), (2.0, 3.5), (3.0, 6.5), (3.0, 3.5)]
    for got, want in zip(seeds, expected):
        assert got.x == pytest.approx(want[0])
        assert got.y == pytest.approx(want[1])


def test_seed_count_and_distance() -> None:
    c = Curve(0, n_steps=5)
    for x, y in [(1.0, 1.0), (2.0, 2.0), (3.0, 2.5), (3.5, 3.5), (3.0, 4.0)]:
        c.insert_step(x, y, Direction.FORWARD)
    seeds = collect_seedpoints(c, 0.75)
    assert len(seeds) == 2 * (c.steps_taken - 1)
    for i, seed in enumerate(seeds):
        x, y = c.step(i // 2)
        assert ((seed.x - x) ** 2 + (seed.y - y) ** 2) ** 0.5 == pytest.approx(0.75)


def test_single_step_curve_has_no_seeds() -> None:
    c = _horizontal_curve(0, 5.0, [2.0])
    assert collect_seedpoints(c, 1.0) == []


def test_expansion_seeds_follow_curves_accepted_mid_iteration() -> None:
    accepted = [_horizontal_curve(0, 5.0, [2.0, 3.0])]
    seeds = ExpansionSeeds(1.0).candidates(accepted)
    first = [next(seeds), next(seeds)]
    assert first[0].y == pytest.approx(6.0)
    accepted.append(_horizontal_curve(1, 8.0, [4.0, 5.0, 6.0]))
    rest = list(seeds)
    assert len(rest) == 4
    assert rest[0].x == pytest.approx(4.0)
    assert rest[0].y == pytest.approx(9.0)


def test_expansion_seeds_stop_when_curves_run_out() -> None:
    assert list(ExpansionSeeds(1.0).candidates([])) == []


def test_point_seeds_keep_order() -> None:
    source = PointSeeds([(1, 2), (3.5, 4.0)])
    assert len(source) == 2
    assert list(source.candidates([])) == [Point(1.0, 2.0), Point(3.5, 4.0)]
