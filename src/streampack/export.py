from __future__ import annotations

import csv
import itertools
import json
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import svgwrite  # type: ignore[reportMissingTypeStubs]

from .curve import Curve
from .types import Direction, NpCurveRows

CURVE_CSV_FIELDS = ["curve_id", "x", "y", "direction", "step_id"]


@dataclass(frozen=True)
class PlacementRun:
    run_dir: Path
    csv_path: Path
    npz_path: Path
    svg_path: Path


def _claim_run_dir(base_dir: Path, stamp: str) -> Path:
    """First free `run_<stamp>_<n>` under `base_dir`, created before returning."""
    for n in itertools.count():
        candidate = base_dir / f"run_{stamp}_{n:03d}"
        try:
            candidate.mkdir(parents=True)
        except FileExistsError:
            continue
        return candidate
    raise AssertionError("unreachable")


def init_run_dir(base_dir: Path, metadata: dict[str, Any]) -> PlacementRun:
    now = time.localtime()
    run_dir = _claim_run_dir(base_dir, time.strftime("%Y%m%d_%H%M%S", now))
    record = {
        **metadata,
        "run_id": run_dir.name,
        "created_at": time.strftime("%Y-%m-%dT%H:%M:%S", now),
    }
    (run_dir / "metadata.json").write_text(
        json.dumps(record, indent=2, sort_keys=True), encoding="utf-8"
    )
    return PlacementRun(
        run_dir=run_dir,
        csv_path=run_dir / "curves.csv",
        npz_path=run_dir / "curves.npz",
        svg_path=run_dir / "curves.svg",
    )


def curves_to_array(curves: Sequence[Curve]) -> NpCurveRows:
    """(N,5) rows of (curve_id, x, y, direction, step_id), curves in order."""
    rows = [row for curve in curves for row in curve.rows()]
    if not rows:
        return np.zeros((0, 5), dtype=np.float64)
    return np.asarray(rows, dtype=np.float64)


def write_curves_csv(path: Path, curves: Sequence[Curve]) -> int:
    """Write one row per step. Returns the number of rows written."""
    n_rows = 0
    with path.open("w", newline="") as csv_file:
        writer = csv.writer(csv_file)
        writer.writerow(CURVE_CSV_FIELDS)
        for curve in curves:
            for curve_id, x, y, direction, step_id in curve.rows():
                writer.writerow([curve_id, repr(x), repr(y), direction, step_id])
                n_rows += 1
    return n_rows


def read_seed_csv(path: Path) -> list[tuple[float, float]]:
    """Read `x,y` rows; a first row that is not numeric is taken as a header."""
    seeds: list[tuple[float, float]] = []
    with path.open(newline="") as csv_file:
        for i, row in enumerate(csv.reader(csv_file)):
            if not row:
                continue
            if len(row) < 2:
                raise ValueError(f"{path}:{i + 1}: expected x,y")
            try:
                x = float(row[0])
                y = float(row[1])
            except ValueError:
                if i == 0:
                    continue
                raise ValueError(f"{path}:{i + 1}: expected numeric x,y") from None
            seeds.append((x, y))
    return seeds


def save_curves_npz(path: Path, curves: Sequence[Curve]) -> Path:
    rows = curves_to_array(curves)
    np.savez_compressed(
        path,
        rows=rows,
        n_curves=len(curves),
        steps_taken=np.asarray([c.steps_taken for c in curves], dtype=np.int64),
    )
    return path


def export_curves_svg(
    out_path: str,
    curves: Sequence[Curve],
    field_width: float,
    stroke: str = "#000000",
    stroke_width: float | str = 0.2,
    canvas_size: tuple[float, float] | tuple[str, str] | None = None,
    min_points: int = 2,
) -> int:
    """
    One polyline per curve, in world coords; the viewBox is the field square.
    Curves with fewer than `min_points` steps are skipped. Returns the count drawn.
    """
    if canvas_size is None:
        dwg = svgwrite.Drawing(out_path, profile="tiny")
    else:
        dwg = svgwrite.Drawing(out_path, profile="tiny", size=canvas_size)
    dwg.attribs["viewBox"] = f"0 0 {field_width} {field_width}"

    g = dwg.g(id="streamlines", stroke=stroke, fill="none", stroke_width=stroke_width)
    n_drawn = 0
    for curve in curves:
        if curve.steps_taken < min_points:
            continue
        # Backward steps are stored outward from the seed; reverse them so the
        # polyline runs tail -> seed -> head.
        pts = curve.points()
        n_back = sum(1 for d in curve.direction if d == Direction.BACKWARD)
        ordered = np.vstack([pts[:n_back][::-1], pts[n_back:]])
        g.add(dwg.polyline(points=[(float(x), float(y)) for x, y in ordered]))
        n_drawn += 1
    dwg.add(g)
    dwg.save()
    return n_drawn
