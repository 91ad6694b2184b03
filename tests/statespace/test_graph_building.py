"""Tests for directed graph construction of rook directional statespaces."""

import networkx as nx
import numpy as np
import pytest

from ctds.directions import CardinalDirection
from ctds.statespace.graph_building import (
    _create_directional_states,
    _create_locations,
    _create_statespace_graph,
)
from ctds.statespace.grid import create_grid_axes, feasible_cell_mask


@pytest.fixture
def axes_and_table():
    axes = create_grid_axes([0.0, 10.0, 20.0], [0.0, 10.0])
    table = np.vstack([np.ones(6), np.arange(6.0)])
    return axes, table


class TestCreateLocations:
    """Tests for _create_locations."""

    def test_northing_major_order(self, axes_and_table):
        """Locations follow the covariate column order."""
        axes, table = axes_and_table
        locations = _create_locations(axes, table, feasible_cell_mask(table, (3, 2)))
        assert list(locations) == [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)]
        for (i, j), location in locations.items():
            assert location.covariates[1] == i + 3 * j

    def test_infeasible_cells_skipped(self, axes_and_table):
        """Cells outside the mask get no Location."""
        axes, table = axes_and_table
        mask = np.ones((3, 2), dtype=bool)
        mask[2, 1] = False
        locations = _create_locations(axes, table, mask)
        assert (2, 1) not in locations
        assert len(locations) == 5


class TestCreateDirectionalStates:
    """Tests for _create_directional_states."""

    def test_sequential_ids(self, axes_and_table):
        """State ids are assigned in creation order."""
        axes, table = axes_and_table
        locations = _create_locations(axes, table, feasible_cell_mask(table, (3, 2)))
        states = _create_directional_states(axes, locations)
        assert [s.id for s in states.values()] == list(range(len(states)))

    def test_arrival_requires_feasible_previous_cell(self, axes_and_table):
        """A state exists only if the cell behind it is part of the domain."""
        axes, table = axes_and_table
        locations = _create_locations(axes, table, feasible_cell_mask(table, (3, 2)))
        states = _create_directional_states(axes, locations)
        for (direction, i, j) in states:
            di, dj = axes.index_offset(direction)
            assert (i - di, j - dj) in locations
        # a 3x2 grid: corners have 2 neighbors, middle cells 3
        assert len(states) == 4 * 2 + 2 * 3


class TestCreateStatespaceGraph:
    """Tests for _create_statespace_graph."""

    @pytest.fixture
    def graph_and_states(self, axes_and_table):
        axes, table = axes_and_table
        locations = _create_locations(axes, table, feasible_cell_mask(table, (3, 2)))
        states = _create_directional_states(axes, locations)
        return _create_statespace_graph(axes, states), states

    def test_is_directed(self, graph_and_states):
        graph, states = graph_and_states
        assert isinstance(graph, nx.DiGraph)
        assert graph.number_of_nodes() == len(states)

    def test_node_attributes(self, graph_and_states):
        """Nodes store their State and coordinates."""
        graph, states = graph_and_states
        for state in states.values():
            data = graph.nodes[state.id]
            assert data["state"] is state
            assert data["pos"] == state.location.coordinates

    def test_edge_attributes(self, graph_and_states):
        """Edges store direction, cell spacing and a sequential id."""
        graph, _ = graph_and_states
        edge_ids = sorted(d["edge_id"] for _, _, d in graph.edges(data=True))
        assert edge_ids == list(range(graph.number_of_edges()))
        for _, _, data in graph.edges(data=True):
            assert isinstance(data["direction"], CardinalDirection)
            assert data["distance"] == pytest.approx(10.0)

    def test_successor_order_follows_direction(self, graph_and_states):
        """Successors are inserted north, east, south, west."""
        graph, states = graph_and_states
        for state in states.values():
            directions = [
                graph.edges[state.id, v]["direction"] for v in graph.successors(state.id)
            ]
            assert directions == sorted(directions)
