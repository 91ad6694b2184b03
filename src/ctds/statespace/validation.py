"""Structural validation of rook directional statespaces.

A correctly built statespace satisfies the graph invariant: an edge
``s -> s'`` exists iff the two locations are rook-adjacent and
``s'.last_movement_direction`` is the compass direction from ``s.location`` to
``s'.location``. Neighbor tuples must also be symmetric:
``s' in successors(s)`` iff ``s in predecessors(s')``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

from ctds.errors import StatespaceValidationError

if TYPE_CHECKING:
    from ctds.statespace.core import Statespace

REQUIRED_NODE_ATTRS = {"state", "pos"}
REQUIRED_EDGE_ATTRS = {"direction", "distance", "edge_id"}


def validate_statespace(statespace: Statespace) -> None:
    """Validate graph structure and metadata of a statespace.

    Parameters
    ----------
    statespace : Statespace
        The statespace to validate.

    Raises
    ------
    StatespaceValidationError
        If any node, edge, or neighbor tuple violates the graph invariant. The
        message names the offending state key.

    Examples
    --------
    >>> import numpy as np
    >>> from ctds import Statespace
    >>> ss = Statespace.from_arrays([0.0, 1.0], [0.0, 1.0], np.zeros((1, 4)))
    >>> validate_statespace(ss)  # passes silently
    """
    graph = statespace.graph
    if not isinstance(graph, nx.DiGraph):
        raise StatespaceValidationError(
            f"Expected networkx.DiGraph, got {type(graph).__name__}."
        )

    for node_id, node_data in graph.nodes(data=True):
        missing = REQUIRED_NODE_ATTRS - set(node_data)
        if missing:
            raise StatespaceValidationError(
                f"Node {node_id} missing required attributes: {missing}."
            )
        if node_data["state"].id != node_id:
            raise StatespaceValidationError(
                f"Node {node_id} stores state with id {node_data['state'].id}."
            )

    axes = statespace.axes
    for u, v, edge_data in graph.edges(data=True):
        missing = REQUIRED_EDGE_ATTRS - set(edge_data)
        if missing:
            raise StatespaceValidationError(
                f"Edge ({u}, {v}) missing required attributes: {missing}."
            )
        source = graph.nodes[u]["state"]
        target = graph.nodes[v]["state"]
        direction = edge_data["direction"]
        if target.last_movement_direction != direction:
            raise StatespaceValidationError(
                f"Edge {source.key} -> {target.key} moves {direction} but the "
                f"target arrived moving {target.last_movement_direction}."
            )
        di, dj = axes.index_offset(direction)
        i, j = source.location.index
        if target.location.index != (i + di, j + dj):
            raise StatespaceValidationError(
                f"Edge {source.key} -> {target.key} joins cells that are not "
                f"rook neighbors in direction {direction}."
            )

    for state in statespace.states:
        for destination in statespace.successors(state):
            if state not in statespace.predecessors(destination):
                raise StatespaceValidationError(
                    f"Asymmetric edge: {destination.key} is reachable from "
                    f"{state.key} but does not list it as a predecessor."
                )
        for source in statespace.predecessors(state):
            if state not in statespace.successors(source):
                raise StatespaceValidationError(
                    f"Asymmetric edge: {source.key} is a predecessor of "
                    f"{state.key} but does not list it as a successor."
                )
