from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import asdict, dataclass

from ..utils import debug, debug_helpers
from .curve import Curve
from .density import DensityGrid
from .field import FlowField
from .seeds import ExpansionSeeds, PointSeeds, SeedSource
from .tracer import draw_curve


@dataclass
class PlacementStats:
    proposed: int = 0
    rejected: int = 0
    discarded: int = 0
    accepted: int = 0


def check_placement_params(
    *,
    n_steps: int,
    min_steps_allowed: int,
    step_length: float,
    d_sep: float,
    n_curves: int | None = None,
) -> None:
    if n_steps < 1:
        raise ValueError("n_steps must be >= 1")
    if min_steps_allowed < 0:
        raise ValueError("min_steps_allowed must be >= 0")
    if not math.isfinite(step_length) or step_length <= 0:
        raise ValueError("step_length must be finite and > 0")
    if not math.isfinite(d_sep) or d_sep <= 0:
        raise ValueError("d_sep must be finite and > 0")
    if n_curves is not None and n_curves < 0:
        raise ValueError("n_curves must be >= 0")


def _check_grid(d_sep: float, flow_field: FlowField, density_grid: DensityGrid) -> None:
    if not math.isclose(d_sep, density_grid.d_sep):
        raise ValueError(
            f"d_sep={d_sep} does not match the density grid cell size {density_grid.d_sep}"
        )
    expected = int(flow_field.width / density_grid.d_sep)
    if density_grid.width != expected or density_grid.height != expected:
        raise ValueError(
            f"density grid is {density_grid.width}x{density_grid.height} cells, "
            f"field of width {flow_field.width} needs {expected}x{expected}"
        )


def _accept(curve: Curve, curves: list[Curve], density_grid: DensityGrid) -> None:
    curve.freeze()
    curves.append(curve)
    density_grid.insert_curve_coords(curve)


def place_from_source(
    source: SeedSource,
    curves: list[Curve],
    n_curves: int | None,
    n_steps: int,
    min_steps_allowed: int,
    step_length: float,
    flow_field: FlowField,
    density_grid: DensityGrid,
    stats: PlacementStats | None = None,
) -> list[Curve]:
    """
    Pull seeds from `source` and grow `curves` in place until the source runs
    dry or `n_curves` curves are accepted (no limit when None).

    Per seed: rejected if it lies off the field or `density_grid` says it is
    too close to an accepted point, otherwise traced; the trace is discarded
    when shorter than `min_steps_allowed`, otherwise frozen, appended and
    inserted into the grid before the next seed is looked at. New ids are
    `len(curves)` at trace time.
    """
    if stats is None:
        stats = PlacementStats()
    seeds = source.candidates(curves)
    while n_curves is None or len(curves) < n_curves:
        seed = next(seeds, None)
        if seed is None:
            break
        stats.proposed += 1
        if not flow_field.in_bounds(seed.x, seed.y):
            stats.rejected += 1
            continue
        if not density_grid.is_valid_next_step(seed.x, seed.y):
            stats.rejected += 1
            continue
        curve = draw_curve(
            len(curves),
            seed.x,
            seed.y,
            n_steps,
            step_length,
            flow_field,
            density_grid,
        )
        if curve.steps_taken < min_steps_allowed:
            stats.discarded += 1
            continue
        _accept(curve, curves, density_grid)
        stats.accepted += 1
    return curves


def even_spaced_curves(
    x_start: float,
    y_start: float,
    n_curves: int,
    n_steps: int,
    min_steps_allowed: int,
    step_length: float,
    d_sep: float,
    flow_field: FlowField,
    density_grid: DensityGrid,
    stats: PlacementStats | None = None,
) -> list[Curve]:
    """
    Jobard-Lefer placement grown from a single start point.

    The first curve is accepted whatever its length. After that, every
    accepted curve in turn offers seeds `d_sep` to its left and right, and
    valid seeds become new curves, until `n_curves` are accepted or no
    accepted curve is left to expand.
    """
    check_placement_params(
        n_steps=n_steps,
        min_steps_allowed=min_steps_allowed,
        step_length=step_length,
        d_sep=d_sep,
        n_curves=n_curves,
    )
    _check_grid(d_sep, flow_field, density_grid)
    if stats is None:
        stats = PlacementStats()
    curves: list[Curve] = []
    if not flow_field.in_bounds(x_start, y_start):
        raise ValueError(
            f"start point ({x_start}, {y_start}) is outside the flow field"
        )
    if n_curves == 0:
        return curves

    first = draw_curve(
        0, x_start, y_start, n_steps, step_length, flow_field, density_grid
    )
    _accept(first, curves, density_grid)
    stats.accepted += 1

    place_from_source(
        ExpansionSeeds(d_sep),
        curves,
        n_curves,
        n_steps,
        min_steps_allowed,
        step_length,
        flow_field,
        density_grid,
        stats,
    )
    debug_helpers.log_counts("even_spaced_curves", asdict(stats))
    if density_grid.dropped:
        debug.log(f"even_spaced_curves: density grid dropped {density_grid.dropped} points")
    return curves


def non_overlapping_curves(
    starting_points: Iterable[tuple[float, float]],
    n_steps: int,
    min_steps_allowed: int,
    step_length: float,
    d_sep: float,
    flow_field: FlowField,
    density_grid: DensityGrid,
    stats: PlacementStats | None = None,
) -> list[Curve]:
    """
    Trace one curve per given start point, in order, with no offset seeding.
    Start points too close to earlier curves are skipped, as are short curves.
    """
    check_placement_params(
        n_steps=n_steps,
        min_steps_allowed=min_steps_allowed,
        step_length=step_length,
        d_sep=d_sep,
    )
    _check_grid(d_sep, flow_field, density_grid)
    if stats is None:
        stats = PlacementStats()
    curves: list[Curve] = []
    place_from_source(
        PointSeeds(starting_points),
        curves,
        None,
        n_steps,
        min_steps_allowed,
        step_length,
        flow_field,
        density_grid,
        stats,
    )
    debug_helpers.log_counts("non_overlapping_curves", asdict(stats))
    return curves
