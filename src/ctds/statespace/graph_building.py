"""Directed connectivity graph construction for rook directional statespaces.

Building happens in two passes over the grid:

1. Create a State for every feasible cell and every direction the cell can be
   *arrived at* from, i.e. the neighbor one step in the opposite direction is
   itself a feasible cell.
2. Wire a directed edge from each State to every State reachable by one rook
   move ``d`` whose arrival direction is ``d``.

States must all exist before edges are added; the second pass only links
States created by the first.
"""

from __future__ import annotations

import math
from typing import Any

import networkx as nx
import numpy as np
from numpy.typing import NDArray

from ctds.directions import CardinalDirection
from ctds.statespace._types import Location, State, StateKey
from ctds.statespace.grid import GridAxes


def _create_locations(
    axes: GridAxes,
    table: NDArray[np.float64],
    feasible: NDArray[np.bool_],
) -> dict[tuple[int, int], Location]:
    """Create a Location for every feasible grid index.

    Locations are created northing-major (``j`` outer, ``i`` inner), matching
    the column order of the covariate table.
    """
    n_eastings, n_northings = axes.shape
    locations: dict[tuple[int, int], Location] = {}
    for j in range(n_northings):
        for i in range(n_eastings):
            if not feasible[i, j]:
                continue
            locations[(i, j)] = Location(
                index=(i, j),
                easting=float(axes.eastings[i]),
                northing=float(axes.northings[j]),
                covariates=table[:, axes.flat_index(i, j)],
            )
    return locations


def _create_directional_states(
    axes: GridAxes,
    locations: dict[tuple[int, int], Location],
) -> dict[StateKey, State]:
    """Create the States that can be arrived at on the feasible grid.

    Returns
    -------
    dict[StateKey, State]
        States keyed by ``(direction, i, j)``, in id order.
    """
    states: dict[StateKey, State] = {}
    for (i, j), location in locations.items():
        for direction in CardinalDirection:
            di, dj = axes.index_offset(direction)
            # arrival by moving `direction` means the previous cell is behind us
            if (i - di, j - dj) not in locations:
                continue
            states[(direction, i, j)] = State(
                id=len(states),
                last_movement_direction=direction,
                location=location,
            )
    return states


def _create_statespace_graph(
    axes: GridAxes,
    states: dict[StateKey, State],
) -> nx.DiGraph:
    """Create the directed transition graph between States.

    Nodes are state ids. Each node stores its State under ``'state'``. Each edge
    ``u -> v`` stores:

    - ``'direction'`` : CardinalDirection of the move, equal to the target
      State's ``last_movement_direction``.
    - ``'distance'`` : Euclidean distance between the two cells.
    - ``'edge_id'`` : sequential identifier in insertion order.

    Parameters
    ----------
    axes : GridAxes
        Validated grid axes.
    states : dict[StateKey, State]
        All States of the statespace, keyed by ``(direction, i, j)``.

    Returns
    -------
    nx.DiGraph
    """
    graph = nx.DiGraph()
    for state in states.values():
        graph.add_node(
            state.id,
            state=state,
            pos=state.location.coordinates,
        )

    edges_to_add: list[tuple[int, int, dict[str, Any]]] = []
    for state in states.values():
        i, j = state.location.index
        for direction in CardinalDirection:
            di, dj = axes.index_offset(direction)
            neighbor = states.get((direction, i + di, j + dj))
            if neighbor is None:
                continue
            distance = math.hypot(
                neighbor.location.easting - state.location.easting,
                neighbor.location.northing - state.location.northing,
            )
            edges_to_add.append(
                (
                    state.id,
                    neighbor.id,
                    {
                        "direction": direction,
                        "distance": distance,
                        "edge_id": len(edges_to_add),
                    },
                )
            )

    graph.add_edges_from(edges_to_add)
    return graph
