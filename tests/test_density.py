import numpy as np
import pytest

from src.streampack.curve import Curve
from src.streampack.density import DensityGrid
from src.streampack.field import FlowField
from src.streampack.types import Direction


def test_grid_dimensions_follow_d_sep() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 10)
    assert (g.width, g.height) == (5, 5)
    g = DensityGrid(10.0, 10.0, 3.0, 10)
    assert (g.width, g.height) == (3, 3)
    g = DensityGrid.for_field(FlowField(np.zeros((12, 12))), 0.5, 10)
    assert (g.width, g.height) == (24, 24)
    assert g.d_sep == 0.5
    assert g.d_test == pytest.approx(0.495)


def test_cell_index_is_row_major() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 10)
    assert g.col(5.9) == 2
    assert g.row(3.1) == 1
    assert g.index(g.col(5.9), g.row(3.1)) == 2 + 1 * 5


def test_in_bounds_reserves_lower_margin() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 10)
    assert not g.in_bounds(1.9, 5.0)
    assert not g.in_bounds(5.0, 1.9)
    assert g.in_bounds(2.0, 2.0)
    assert g.in_bounds(9.9, 9.9)
    assert not g.in_bounds(10.0, 5.0)
    assert not g.in_bounds(5.0, 10.0)
    assert not g.in_bounds(-0.5, 5.0)


def test_out_of_bounds_points_are_never_stored_or_valid() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 10)
    g.insert_coord(1.0, 5.0)
    g.insert_coord(5.0, 12.0)
    assert len(g) == 0
    assert not g.is_valid_next_step(1.0, 5.0)
    assert not g.is_valid_next_step(5.0, 10.5)


def test_is_valid_uses_shrunk_separation() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 10)
    assert g.is_valid_next_step(5.0, 5.0)
    g.insert_coord(5.0, 5.0)
    assert not g.is_valid_next_step(5.0, 5.0)
    assert not g.is_valid_next_step(5.5, 5.0)
    assert not g.is_valid_next_step(6.97, 5.0)
    assert g.is_valid_next_step(6.99, 5.0)
    # Exactly d_sep away is accepted thanks to the 1% shrink.
    assert g.is_valid_next_step(7.0, 5.0)
    assert g.is_valid_next_step(5.0, 3.0)


def test_is_valid_sees_neighbouring_cells() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 10)
    g.insert_coord(3.9, 5.9)
    assert g.col(3.9) != g.col(4.1)
    assert g.row(5.9) != g.row(6.1)
    assert not g.is_valid_next_step(4.1, 6.1)


def test_scan_is_clamped_at_far_edges() -> None:
    g = DensityGrid(10.0, 6.0, 2.0, 10)
    assert (g.width, g.height) == (5, 3)
    assert g.is_valid_next_step(9.5, 5.5)
    g.insert_coord(9.5, 5.5)
    assert not g.is_valid_next_step(9.0, 5.0)
    assert g.is_valid_next_step(9.5, 2.5)


def test_drop_policy_keeps_one_slot_free() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 3)
    assert not g.near_capacity(5.0, 5.0)
    g.insert_coord(5.0, 5.0)
    g.insert_coord(5.1, 5.0)
    assert g.near_capacity(5.0, 5.0)
    g.insert_coord(5.2, 5.0)
    assert g.occupancy(5.0, 5.0) == 2
    assert g.dropped == 1
    assert len(g) == 2


def test_grow_policy_never_drops() -> None:
    g = DensityGrid(10.0, 10.0, 2.0, 3, capacity_policy="grow")
    for i in range(6):
        g.insert_coord(5.0 + 0.1 * i, 5.0)
    assert g.occupancy(5.0, 5.0) == 6
    assert g.dropped == 0
    assert not g.near_capacity(5.0, 5.0)


def test_insert_curve_coords_inserts_every_step() -> None:
    c = Curve(0, n_steps=3)
    c.insert_step(3.0, 3.0, Direction.BACKWARD)
    c.insert_step(6.0, 3.0, Direction.FORWARD)
    c.insert_step(1.0, 3.0, Direction.FORWARD)
    g = DensityGrid(10.0, 10.0, 2.0, 10)
    g.insert_curve_coords(c)
    assert len(g) == 2
    assert g.occupancy(3.0, 3.0) == 1
    assert g.occupancy(6.0, 3.0) == 1
    assert not g.is_valid_next_step(6.5, 3.0)


def test_density_grid_rejects_invalid_inputs() -> None:
    with pytest.raises(ValueError):
        DensityGrid(10.0, 10.0, 0.0, 10)
    with pytest.raises(ValueError):
        DensityGrid(10.0, 10.0, float("nan"), 10)
    with pytest.raises(ValueError):
        DensityGrid(10.0, 10.0, 2.0, 0)
    with pytest.raises(ValueError):
        DensityGrid(10.0, 10.0, 2.0, 10, capacity_policy="ring")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        DensityGrid(1.0, 1.0, 2.0, 10)
