"""Tests for grid axis validation and feasibility masks."""

import numpy as np
import pytest

from ctds.directions import CardinalDirection
from ctds.errors import InvalidInputError
from ctds.statespace.grid import (
    as_covariate_table,
    create_grid_axes,
    feasible_cell_mask,
)


class TestCreateGridAxes:
    """Tests for create_grid_axes."""

    def test_increasing_axes(self):
        """Increasing vectors give positive steps."""
        axes = create_grid_axes([0.0, 1.0, 2.0], [5.0, 6.0])
        assert axes.shape == (3, 2)
        assert axes.east_step == 1
        assert axes.north_step == 1
        assert axes.n_cells == 6

    def test_decreasing_axes(self):
        """Decreasing vectors give negative steps."""
        axes = create_grid_axes([3.0, 2.0, 1.0], [10.0, 5.0])
        assert axes.east_step == -1
        assert axes.north_step == -1

    @pytest.mark.parametrize(
        "eastings",
        [[0.0, 2.0, 1.0], [0.0, 0.0, 1.0], [2.0, 1.0, 1.5]],
    )
    def test_non_monotonic_rejected(self, eastings):
        """Non-monotonic or repeated coordinates are rejected."""
        with pytest.raises(InvalidInputError, match="strictly"):
            create_grid_axes(eastings, [0.0, 1.0])

    def test_too_few_points_rejected(self):
        """A single grid point per axis is rejected."""
        with pytest.raises(InvalidInputError, match="at least 2"):
            create_grid_axes([0.0, 1.0], [0.0])

    def test_non_finite_rejected(self):
        """NaN coordinates are rejected."""
        with pytest.raises(InvalidInputError, match="NaN"):
            create_grid_axes([0.0, np.nan], [0.0, 1.0])

    def test_index_offset_accounts_for_axis_direction(self):
        """Moving north decreases j when northings decrease."""
        axes = create_grid_axes([0.0, 1.0], [1.0, 0.0])
        assert axes.index_offset(CardinalDirection.NORTH) == (0, -1)
        assert axes.index_offset(CardinalDirection.SOUTH) == (0, 1)
        assert axes.index_offset(CardinalDirection.EAST) == (1, 0)
        assert axes.index_offset(CardinalDirection.WEST) == (-1, 0)

    def test_flat_index_eastings_fastest(self):
        """Column order has eastings varying fastest."""
        axes = create_grid_axes([0.0, 1.0, 2.0], [0.0, 1.0])
        assert axes.flat_index(0, 0) == 0
        assert axes.flat_index(2, 0) == 2
        assert axes.flat_index(0, 1) == 3
        assert axes.flat_index(2, 1) == 5


class TestCovariateTable:
    """Tests for as_covariate_table and feasible_cell_mask."""

    def test_one_dimensional_covariates(self):
        """A 1-D array becomes a single-row table."""
        table = as_covariate_table(np.arange(6.0), 6)
        assert table.shape == (1, 6)

    def test_float_table_not_copied(self):
        """Float64 tables are used in place."""
        covariates = np.zeros((2, 4))
        table = as_covariate_table(covariates, 4)
        assert np.shares_memory(table, covariates)

    def test_column_mismatch_rejected(self):
        """Tables must have one column per cell."""
        with pytest.raises(InvalidInputError, match="one column per grid cell"):
            as_covariate_table(np.zeros((1, 5)), 6)

    def test_no_constraint_keeps_all_cells(self):
        """Without a constraint every cell is feasible."""
        mask = feasible_cell_mask(np.zeros((1, 6)), (3, 2))
        assert mask.shape == (3, 2)
        assert mask.all()

    def test_constraint_mask_layout(self):
        """mask[i, j] refers to column i + j * n_eastings."""
        values = np.array([[1.0, 1.0, -1.0, 1.0, 1.0, 1.0]])
        mask = feasible_cell_mask(values, (3, 2), linear_constraint=[1.0])
        assert not mask[2, 0]
        assert mask.sum() == 5

    def test_boundary_value_is_feasible(self):
        """A dot product of exactly zero keeps the cell."""
        mask = feasible_cell_mask(np.zeros((1, 4)), (2, 2), linear_constraint=[1.0])
        assert mask.all()

    def test_constraint_length_mismatch_rejected(self):
        """The constraint must match the number of covariates."""
        with pytest.raises(InvalidInputError, match="linear_constraint"):
            feasible_cell_mask(np.zeros((2, 4)), (2, 2), linear_constraint=[1.0])
