from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, TypedDict, cast

import numpy as np

from . import PROJECT_ROOT
from .streampack.density import DensityGrid
from .streampack.export import (
    export_curves_svg,
    init_run_dir,
    read_seed_csv,
    save_curves_npz,
    write_curves_csv,
)
from .streampack.field import FlowField, harmonic_angle_grid, perlin_angle_grid
from .streampack.placement import (
    PlacementStats,
    even_spaced_curves,
    non_overlapping_curves,
)
from .utils import debug


class CliArgs(Protocol):
    output_dir: str
    field: str | None
    field_kind: str
    width: int
    seed: int
    x_start: float
    y_start: float
    n_curves: int
    n_steps: int
    min_steps: int
    step_length: float | None
    d_sep: float
    cell_capacity: int
    capacity_policy: str
    seeds: str | None
    no_svg: bool
    verbose: bool


class CliArgsDict(TypedDict):
    output_dir: str
    field: str | None
    field_kind: str
    width: int
    seed: int
    x_start: float
    y_start: float
    n_curves: int
    n_steps: int
    min_steps: int
    step_length: float | None
    d_sep: float
    cell_capacity: int
    capacity_policy: str
    seeds: str | None
    no_svg: bool
    verbose: bool


class DerivedParams(TypedDict):
    field_source: str
    field_width: int
    step_length: float
    grid_width: int
    grid_height: int
    mode: str


class RunParams(TypedDict):
    cli_args: CliArgsDict
    derived: DerivedParams


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Place evenly spaced streamlines in a 2D flow field"
    )
    ap.add_argument(
        "--output_dir",
        default=str(PROJECT_ROOT / "runs"),
        help="Base directory; each run gets a timestamped subdirectory (default: runs/)",
    )
    ap.add_argument(
        "--field",
        default=None,
        help="Square .npy grid of angles in radians (overrides --field_kind)",
    )
    ap.add_argument(
        "--field_kind",
        choices=["harmonic", "perlin"],
        default="harmonic",
        help="Generated field when --field is not given (perlin needs `noise`)",
    )
    ap.add_argument("--width", type=int, default=120, help="Generated field width")
    ap.add_argument("--seed", type=int, default=50, help="Field generator seed")
    ap.add_argument("--x_start", type=float, default=45.0)
    ap.add_argument("--y_start", type=float, default=24.0)
    ap.add_argument("--n_curves", type=int, default=1500)
    ap.add_argument("--n_steps", type=int, default=30, help="Step budget per curve")
    ap.add_argument(
        "--min_steps", type=int, default=5, help="Shorter curves are discarded"
    )
    ap.add_argument(
        "--step_length",
        type=float,
        default=None,
        help="Integration step (default: 0.01 * field width)",
    )
    ap.add_argument(
        "--d_sep", type=float, default=0.8, help="Minimum separation between curves"
    )
    ap.add_argument("--cell_capacity", type=int, default=2000)
    ap.add_argument("--capacity_policy", choices=["drop", "grow"], default="drop")
    ap.add_argument(
        "--seeds",
        default=None,
        help="CSV of x,y start points; places one curve per point, no expansion",
    )
    ap.add_argument("--no_svg", action="store_true", help="Skip the SVG preview")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logs")
    return ap


def load_field(args: CliArgs) -> tuple[FlowField, str]:
    if args.field is not None:
        path = Path(args.field)
        angles = np.load(path)
        return FlowField(np.asarray(angles, dtype=np.float64)), str(path)
    if args.width < 1:
        raise ValueError("width must be >= 1")
    if args.field_kind == "perlin":
        grid = perlin_angle_grid(args.width, seed=args.seed)
    else:
        grid = harmonic_angle_grid(args.width, np.random.default_rng(args.seed))
    return FlowField(grid), f"{args.field_kind}(seed={args.seed})"


def main(argv: Sequence[str] | None = None) -> None:
    ap = build_parser()
    args = cast(CliArgs, ap.parse_args(argv))
    debug.set_verbose(args.verbose)

    if args.cell_capacity < 1:
        raise ValueError("cell_capacity must be >= 1")

    field, field_source = load_field(args)
    step_length = (
        0.01 * field.width if args.step_length is None else float(args.step_length)
    )
    grid = DensityGrid.for_field(
        field,
        float(args.d_sep),
        args.cell_capacity,
        capacity_policy="grow" if args.capacity_policy == "grow" else "drop",
    )

    cli_args = cast(CliArgsDict, dict(vars(args)))
    derived: DerivedParams = {
        "field_source": field_source,
        "field_width": field.width,
        "step_length": float(step_length),
        "grid_width": grid.width,
        "grid_height": grid.height,
        "mode": "non_overlapping" if args.seeds is not None else "even_spaced",
    }
    run_params: RunParams = {"cli_args": cli_args, "derived": derived}

    stats = PlacementStats()
    if args.seeds is not None:
        seeds = read_seed_csv(Path(args.seeds))
        debug.log(f"seeds: loaded {len(seeds)} start points from {args.seeds}")
        curves = non_overlapping_curves(
            seeds,
            n_steps=args.n_steps,
            min_steps_allowed=args.min_steps,
            step_length=step_length,
            d_sep=float(args.d_sep),
            flow_field=field,
            density_grid=grid,
            stats=stats,
        )
    else:
        curves = even_spaced_curves(
            float(args.x_start),
            float(args.y_start),
            n_curves=args.n_curves,
            n_steps=args.n_steps,
            min_steps_allowed=args.min_steps,
            step_length=step_length,
            d_sep=float(args.d_sep),
            flow_field=field,
            density_grid=grid,
            stats=stats,
        )

    run = init_run_dir(Path(args.output_dir), dict(run_params))
    print(f"run dir={run.run_dir}")
    n_rows = write_curves_csv(run.csv_path, curves)
    save_curves_npz(run.npz_path, curves)
    if not args.no_svg:
        export_curves_svg(str(run.svg_path), curves, field_width=float(field.width))
    if grid.dropped:
        print(
            f"WARNING: {grid.dropped} points dropped by full density cells; "
            "raise --cell_capacity or use --capacity_policy grow"
        )
    print(
        f"Saved: {run.csv_path}  curves={len(curves)} rows={n_rows} "
        f"rejected={stats.rejected} discarded={stats.discarded}"
    )


if __name__ == "__main__":
    main()
