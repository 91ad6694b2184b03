"""Rook directional statespace for continuous-time discrete-space movement.

The Statespace class owns the Locations (grid cells) and States (location x
last movement direction) of a movement model and the directed graph linking
States that can follow one another.

Examples
--------
>>> import numpy as np
>>> from ctds import Statespace
>>> ss = Statespace.from_arrays(
...     eastings=[0.0, 1.0, 2.0],
...     northings=[0.0, 1.0, 2.0],
...     covariates=np.zeros((1, 9)),
... )
>>> ss.n_locations, ss.n_states
(9, 24)
>>> center = ss.state_at("north", 1, 1)
>>> sorted(str(s.last_movement_direction) for s in ss.successors(center))
['east', 'north', 'south', 'west']
"""

from __future__ import annotations

import logging
from typing import Any

import networkx as nx
import numpy as np
from numpy.typing import ArrayLike, NDArray

from ctds.directions import CardinalDirection
from ctds.errors import InvalidInputError, NotFoundError
from ctds.statespace._types import Location, State, StateKey
from ctds.statespace.graph_building import (
    _create_directional_states,
    _create_locations,
    _create_statespace_graph,
)
from ctds.statespace.grid import (
    GridAxes,
    as_covariate_table,
    create_grid_axes,
    feasible_cell_mask,
)

logger = logging.getLogger(__name__)


class Statespace:
    """Grid of Locations and the directed graph of directional States.

    Use :meth:`from_arrays` (or :func:`build_graph`) to construct a statespace.
    States are stored in an arena and addressed by their integer ``id``; all
    neighbor relations refer to States in that arena.

    Attributes
    ----------
    axes : GridAxes
        Validated easting/northing vectors and their orientation.
    covariates : NDArray[np.float64], shape (n_covariates, n_cells)
        Covariate table; every Location's covariates are a view of one column.
    graph : nx.DiGraph
        Transition graph over state ids.
    """

    def __init__(
        self,
        axes: GridAxes,
        covariates: NDArray[np.float64],
        locations: dict[tuple[int, int], Location],
        states: dict[StateKey, State],
        graph: nx.DiGraph,
    ) -> None:
        self.axes = axes
        self.covariates = covariates
        self.graph = graph
        self._locations = locations
        self._states_by_key = states
        self._states: tuple[State, ...] = tuple(states.values())

        self._successors: tuple[tuple[State, ...], ...] = tuple(
            tuple(self._states[v] for v in graph.successors(s.id))
            for s in self._states
        )
        self._predecessors: tuple[tuple[State, ...], ...] = tuple(
            tuple(
                sorted(
                    (self._states[u] for u in graph.predecessors(s.id)),
                    key=lambda p: p.key,
                )
            )
            for s in self._states
        )

    @classmethod
    def from_arrays(
        cls,
        eastings: ArrayLike,
        northings: ArrayLike,
        covariates: ArrayLike,
        linear_constraint: ArrayLike | None = None,
    ) -> Statespace:
        """Build a statespace from raw coordinate and covariate arrays.

        Parameters
        ----------
        eastings : array-like, shape (n_eastings,)
            Strictly monotonic (increasing or decreasing) easting coordinates.
        northings : array-like, shape (n_northings,)
            Strictly monotonic (increasing or decreasing) northing coordinates.
        covariates : array-like, shape (n_covariates, n_eastings * n_northings)
            Covariate table with one column per grid cell, eastings varying
            fastest and northings slowest. A 1-D array is a single covariate.
        linear_constraint : array-like, shape (n_covariates,), optional
            Cells whose covariates ``x`` give ``linear_constraint @ x < 0`` are
            excluded from the domain, along with any State that could only be
            reached through them. None keeps every cell.

        Returns
        -------
        Statespace

        Raises
        ------
        InvalidInputError
            If a coordinate vector is not strictly monotonic or has fewer than
            two points, or the covariate table does not match the grid.
        """
        axes = create_grid_axes(eastings, northings)
        table = as_covariate_table(covariates, axes.n_cells)
        feasible = feasible_cell_mask(table, axes.shape, linear_constraint)

        locations = _create_locations(axes, table, feasible)
        if not locations:
            raise InvalidInputError(
                "linear_constraint excludes every grid cell; the domain is empty"
            )
        states = _create_directional_states(axes, locations)
        graph = _create_statespace_graph(axes, states)

        logger.debug(
            "Built statespace on %dx%d grid: %d locations (%d excluded), "
            "%d states, %d edges",
            axes.shape[0],
            axes.shape[1],
            len(locations),
            axes.n_cells - len(locations),
            len(states),
            graph.number_of_edges(),
        )
        return cls(axes, table, locations, states, graph)

    # ------------------------------------------------------------------
    # Sizes
    # ------------------------------------------------------------------

    @property
    def grid_shape(self) -> tuple[int, int]:
        """``(n_eastings, n_northings)`` of the full grid."""
        return self.axes.shape

    @property
    def n_locations(self) -> int:
        return len(self._locations)

    @property
    def n_states(self) -> int:
        return len(self._states)

    @property
    def n_covariates(self) -> int:
        return int(self.covariates.shape[0])

    @property
    def locations(self) -> tuple[Location, ...]:
        """All Locations, northing-major order."""
        return tuple(self._locations.values())

    @property
    def states(self) -> tuple[State, ...]:
        """All States, indexed by ``State.id``."""
        return self._states

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def location_at(self, i: int, j: int) -> Location:
        """Return the Location at grid index ``(i, j)``.

        Raises
        ------
        NotFoundError
            If the index is outside the grid or excluded by the feasibility
            constraint.
        """
        try:
            return self._locations[(int(i), int(j))]
        except KeyError:
            raise NotFoundError(
                f"grid index ({i}, {j}) is outside the feasible domain"
            ) from None

    def state_at(
        self, direction: CardinalDirection | str, i: int, j: int
    ) -> State:
        """Return the State ``(direction, i, j)``.

        Raises
        ------
        NotFoundError
            If no State with that arrival direction exists at the cell, e.g.
            arriving from the south at the southern boundary of the domain.
        InvalidInputError
            If `direction` is not a valid direction name.
        """
        direction = CardinalDirection.from_string(direction)
        try:
            return self._states_by_key[(direction, int(i), int(j))]
        except KeyError:
            raise NotFoundError(
                f"no state with last_movement_direction='{direction}' at grid "
                f"index ({i}, {j}); the cell is infeasible or cannot be "
                f"arrived at moving {direction}"
            ) from None

    def state_by_id(self, state_id: int) -> State:
        try:
            return self._states[state_id]
        except IndexError:
            raise NotFoundError(f"no state with id {state_id}") from None

    def successors(self, state: State) -> tuple[State, ...]:
        """States reachable in one move from `state`, in direction order."""
        return self._successors[state.id]

    def predecessors(self, state: State) -> tuple[State, ...]:
        """States from which `state` is reachable in one move."""
        return self._predecessors[state.id]

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    @staticmethod
    def describe_location(location: Location) -> dict[str, Any]:
        """Plain-dict view of a Location for export."""
        return {
            "easting": location.easting,
            "northing": location.northing,
            "covariates": location.covariates.copy(),
        }

    def describe_state(self, state: State) -> dict[str, Any]:
        """Plain-dict view of a State and its neighbors for export.

        Returns
        -------
        dict
            Keys ``last_movement_direction``, ``location``, ``to`` and ``from``;
            the last two are lists of ``{last_movement_direction, location}``.
        """

        def brief(s: State) -> dict[str, Any]:
            return {
                "last_movement_direction": str(s.last_movement_direction),
                "location": self.describe_location(s.location),
            }

        summary = brief(state)
        summary["to"] = [brief(s) for s in self.successors(state)]
        summary["from"] = [brief(s) for s in self.predecessors(state)]
        return summary

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(grid_shape={self.grid_shape}, "
            f"n_locations={self.n_locations}, n_states={self.n_states}, "
            f"n_covariates={self.n_covariates})"
        )


def build_graph(
    eastings: ArrayLike,
    northings: ArrayLike,
    covariates: ArrayLike,
    linear_constraint: ArrayLike | None = None,
) -> Statespace:
    """Build a rook directional statespace; see :meth:`Statespace.from_arrays`."""
    return Statespace.from_arrays(eastings, northings, covariates, linear_constraint)
