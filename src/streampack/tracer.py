from __future__ import annotations

import math

from .curve import Curve
from .density import DensityGrid
from .field import FlowField
from .types import Direction


def draw_curve(
    curve_id: int,
    x_start: float,
    y_start: float,
    n_steps: int,
    step_length: float,
    flow_field: FlowField,
    density_grid: DensityGrid,
) -> Curve:
    """
    Integrate a streamline through `flow_field` from (x_start, y_start).

    The start point is step 0. The curve first grows backward (against the
    flow) until the step count reaches n_steps // 2, then forward from the
    start point until it reaches n_steps. Either phase ends early when the
    current point leaves the field or the next point falls off the field or
    fails `density_grid.is_valid_next_step`; the failing point is not recorded.

    The grid is only read here. Inserting accepted curves is the caller's job.
    """
    curve = Curve(curve_id, n_steps)
    curve.insert_step(x_start, y_start, Direction.BACKWARD)

    x = x_start
    y = y_start
    i = 1
    while i < n_steps // 2:
        if not flow_field.in_bounds(x, y):
            break
        angle = flow_field.angle_at(x, y)
        x = x - step_length * math.cos(angle)
        y = y - step_length * math.sin(angle)
        if not flow_field.in_bounds(x, y) or not density_grid.is_valid_next_step(x, y):
            break
        curve.insert_step(x, y, Direction.BACKWARD)
        i += 1

    x = x_start
    y = y_start
    while i < n_steps:
        if not flow_field.in_bounds(x, y):
            break
        angle = flow_field.angle_at(x, y)
        x = x + step_length * math.cos(angle)
        y = y + step_length * math.sin(angle)
        if not flow_field.in_bounds(x, y) or not density_grid.is_valid_next_step(x, y):
            break
        curve.insert_step(x, y, Direction.FORWARD)
        i += 1

    return curve
