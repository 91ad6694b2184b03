"""Helpers that validate grid axes and covariates for rook statespaces.

A statespace grid is described by two strictly monotonic coordinate vectors
(eastings and northings, each increasing or decreasing) and a covariate table
with one column per grid cell. Columns follow the raster convention used by
most spatial packages: eastings vary fastest and northings slowest, so the
cell at grid index ``(i, j)`` owns column ``i + j * n_eastings``.

The functions here turn those raw arrays into validated NumPy arrays, determine
the axis orientation and compute which cells satisfy an optional linear
feasibility constraint.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ctds.directions import CardinalDirection
from ctds.errors import InvalidInputError


@dataclass(frozen=True)
class GridAxes:
    """Validated coordinate axes of a rook grid.

    Attributes
    ----------
    eastings : NDArray[np.float64], shape (n_eastings,)
        Easting coordinate of each grid column index ``i``.
    northings : NDArray[np.float64], shape (n_northings,)
        Northing coordinate of each grid row index ``j``.
    east_step : int
        +1 if eastings increase with ``i``, -1 if they decrease.
    north_step : int
        +1 if northings increase with ``j``, -1 if they decrease.
    """

    eastings: NDArray[np.float64]
    northings: NDArray[np.float64]
    east_step: int
    north_step: int

    @property
    def shape(self) -> tuple[int, int]:
        """Grid shape ``(n_eastings, n_northings)``."""
        return (len(self.eastings), len(self.northings))

    @property
    def n_cells(self) -> int:
        return len(self.eastings) * len(self.northings)

    def index_offset(self, direction: CardinalDirection) -> tuple[int, int]:
        """Grid index offset ``(di, dj)`` of one move in `direction`.

        Accounts for axes that run against the geographic direction, e.g. a
        northing vector that decreases from the top row of a raster.
        """
        d_easting, d_northing = direction.geographic_step
        return (d_easting * self.east_step, d_northing * self.north_step)

    def flat_index(self, i: int, j: int) -> int:
        """Covariate column of grid index ``(i, j)``."""
        return i + j * len(self.eastings)


def _validate_axis(values: ArrayLike, name: str) -> tuple[NDArray[np.float64], int]:
    """Validate a coordinate vector and return it with its step sign.

    Raises
    ------
    InvalidInputError
        If the vector is not 1-D, has fewer than 2 elements, contains
        non-finite values, or is not strictly monotonic.
    """
    axis = np.asarray(values, dtype=np.float64)
    if axis.ndim != 1:
        raise InvalidInputError(f"{name} must be 1-D (got shape {axis.shape})")
    if axis.size < 2:
        raise InvalidInputError(
            f"{name} needs at least 2 grid points (got {axis.size})"
        )
    if not np.all(np.isfinite(axis)):
        raise InvalidInputError(f"{name} contains NaN or infinite values")

    diffs = np.diff(axis)
    step = 1 if diffs[0] > 0 else -1
    if not (np.all(diffs > 0) if step == 1 else np.all(diffs < 0)):
        raise InvalidInputError(
            f"{name} must be strictly increasing or strictly decreasing"
        )
    return axis, step


def create_grid_axes(eastings: ArrayLike, northings: ArrayLike) -> GridAxes:
    """Validate easting/northing vectors and determine their orientation.

    Parameters
    ----------
    eastings : array-like, shape (n_eastings,)
        Strictly monotonic easting coordinates.
    northings : array-like, shape (n_northings,)
        Strictly monotonic northing coordinates.

    Returns
    -------
    GridAxes

    Examples
    --------
    >>> axes = create_grid_axes([0.0, 1.0, 2.0], [10.0, 5.0])
    >>> axes.shape, axes.east_step, axes.north_step
    ((3, 2), 1, -1)
    """
    e, east_step = _validate_axis(eastings, "eastings")
    n, north_step = _validate_axis(northings, "northings")
    return GridAxes(eastings=e, northings=n, east_step=east_step, north_step=north_step)


def as_covariate_table(covariates: ArrayLike, n_cells: int) -> NDArray[np.float64]:
    """Return the covariate table as a 2-D ``(n_covariates, n_cells)`` array.

    A 1-D input of length `n_cells` is treated as a single covariate. Float64
    inputs are used without copying so location covariates can be views.

    Raises
    ------
    InvalidInputError
        If the number of columns does not match the number of grid cells.
    """
    table = np.asarray(covariates, dtype=np.float64)
    if table.ndim == 1:
        table = table.reshape(1, -1)
    if table.ndim != 2:
        raise InvalidInputError(
            f"covariates must be 1-D or 2-D (got shape {table.shape})"
        )
    if table.shape[1] != n_cells:
        raise InvalidInputError(
            f"covariates must have one column per grid cell: expected "
            f"{n_cells} columns (n_eastings * n_northings), got {table.shape[1]}"
        )
    return table


def feasible_cell_mask(
    table: NDArray[np.float64],
    grid_shape: tuple[int, int],
    linear_constraint: ArrayLike | None = None,
) -> NDArray[np.bool_]:
    """Mask of grid cells that satisfy ``w @ x >= 0``.

    Parameters
    ----------
    table : NDArray[np.float64], shape (n_covariates, n_cells)
        Covariate table, eastings varying fastest.
    grid_shape : tuple[int, int]
        ``(n_eastings, n_northings)``.
    linear_constraint : array-like, shape (n_covariates,), optional
        Feasibility vector ``w``. None (or the zero vector) keeps every cell.

    Returns
    -------
    NDArray[np.bool_], shape (n_eastings, n_northings)
        ``mask[i, j]`` is True when cell ``(i, j)`` is part of the domain.
    """
    if linear_constraint is None:
        return np.ones(grid_shape, dtype=bool)

    w = np.asarray(linear_constraint, dtype=np.float64).ravel()
    if w.size != table.shape[0]:
        raise InvalidInputError(
            f"linear_constraint has {w.size} entries but there are "
            f"{table.shape[0]} covariates"
        )
    keep = (w @ table) >= 0
    # columns are ordered with eastings fastest, i.e. Fortran order over (i, j)
    return keep.reshape(grid_shape, order="F")
