"""Node types of a rook directional statespace."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from ctds.directions import CardinalDirection


@dataclass(frozen=True, eq=False)
class Location:
    """A grid cell.

    Identity is the grid index ``(i, j)``; a statespace owns exactly one
    Location per feasible index so instances compare by identity.

    Attributes
    ----------
    index : tuple[int, int]
        Grid index ``(i, j)`` into the easting and northing vectors.
    easting, northing : float
        Cell coordinates.
    covariates : NDArray[np.float64], shape (n_covariates,)
        View of this cell's column in the statespace covariate table.
    """

    index: tuple[int, int]
    easting: float
    northing: float
    covariates: NDArray[np.float64] = field(repr=False)

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.easting, self.northing)


@dataclass(frozen=True, eq=False)
class State:
    """A location paired with the direction of the move used to arrive there.

    ``State(id=7, last_movement_direction=NORTH, location=L)`` reads "at L,
    having just moved north", i.e. the previous location was south of L.

    Attributes
    ----------
    id : int
        Arena index of the state within its statespace (``0..n_states-1``).
        Transition caches and graph nodes are keyed by this id.
    last_movement_direction : CardinalDirection
        Direction of the most recent move.
    location : Location
        Cell the state is anchored to.
    """

    id: int
    last_movement_direction: CardinalDirection
    location: Location

    @property
    def key(self) -> tuple[CardinalDirection, int, int]:
        """Lookup key ``(direction, i, j)``."""
        i, j = self.location.index
        return (self.last_movement_direction, i, j)

    @property
    def coordinates(self) -> tuple[float, float]:
        return self.location.coordinates


StateKey = tuple[CardinalDirection, int, int]

__all__ = ["Location", "State", "StateKey"]
