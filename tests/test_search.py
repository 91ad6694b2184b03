"""Tests for nearest-location search and initial state sampling."""

import numpy as np
import pytest

from ctds import Statespace, StatespaceSearch, build_spatial_index
from ctds.errors import InvalidInputError, NotFoundError
from ctds.likelihood import LocationLikelihood
from ctds.search import sample_gaussian_states


@pytest.fixture
def isolated_cell_statespace():
    """3x3 grid keeping cells (0, 0), (1, 0) and the isolated cell (2, 2)."""
    keep = np.full(9, -1.0)
    keep[[0, 1, 8]] = 1.0
    return Statespace.from_arrays(
        np.arange(3.0), np.arange(3.0), keep, linear_constraint=[1.0]
    )


class TestNearestLocation:
    """Tests for StatespaceSearch lookups."""

    def test_exact_vertex(self, medium_statespace):
        search = StatespaceSearch(medium_statespace)
        location, distance = search.nearest_location(30.0, 20.0, return_distance=True)
        assert location is medium_statespace.location_at(3, 2)
        assert distance == 0.0

    def test_between_vertices(self, medium_statespace):
        search = build_spatial_index(medium_statespace)
        location, distance = search.nearest_location(
            12.0, 38.0, return_distance=True
        )
        assert location.index == (1, 4)
        assert distance == pytest.approx(np.hypot(2.0, 2.0))

    def test_outside_grid_snaps_to_boundary(self, small_statespace):
        search = StatespaceSearch(small_statespace)
        assert search.nearest_location(-5.0, 1.1).index == (0, 1)

    def test_map_locations(self, small_statespace):
        search = StatespaceSearch(small_statespace)
        locations = search.map_locations([[0.1, 0.2], [1.9, 1.8], [1.0, 0.9]])
        assert [loc.index for loc in locations] == [(0, 0), (2, 2), (1, 1)]

    def test_map_locations_shape_check(self, small_statespace):
        search = StatespaceSearch(small_statespace)
        with pytest.raises(InvalidInputError, match=r"\(n, 2\)"):
            search.map_locations([0.0, 1.0, 2.0])

    def test_excluded_cell_never_returned(self, masked_statespace):
        search = StatespaceSearch(masked_statespace)
        location, distance = search.nearest_location(1.0, 1.0, return_distance=True)
        assert location.index != (1, 1)
        assert distance == pytest.approx(1.0)

    def test_location_without_states_not_indexed(self, isolated_cell_statespace):
        """A feasible cell with no feasible neighbor anchors no states."""
        ss = isolated_cell_statespace
        isolated = ss.location_at(2, 2)
        search = StatespaceSearch(ss)
        assert isolated not in search.locations
        assert search.nearest_location(2.0, 2.0).index == (1, 0)
        with pytest.raises(NotFoundError):
            search.ordered_states_at(isolated)


class TestStatesAt:
    """Tests for the reverse index from Locations to States."""

    def test_counts_match_neighbors(self, small_statespace):
        search = StatespaceSearch(small_statespace)
        assert len(search.states_at(small_statespace.location_at(0, 0))) == 2
        assert len(search.states_at(small_statespace.location_at(1, 0))) == 3
        assert len(search.states_at(small_statespace.location_at(1, 1))) == 4

    def test_ordered_by_key(self, small_statespace):
        search = StatespaceSearch(small_statespace)
        states = search.ordered_states_at(small_statespace.location_at(1, 1))
        assert [str(s.last_movement_direction) for s in states] == [
            "north",
            "east",
            "south",
            "west",
        ]
        assert search.states_at(small_statespace.location_at(1, 1)) == frozenset(
            states
        )


class TestSampleGaussianStates:
    """Tests for sampling an initial particle ensemble."""

    def test_tight_observation(self, small_statespace):
        """A precise observation puts every particle at the observed cell."""
        search = StatespaceSearch(small_statespace)
        lik = LocationLikelihood(1.0, 1.0, 0.01, 0.01)
        states = sample_gaussian_states(search, lik, 200, rng=42)
        assert len(states) == 200
        assert all(s.location.index == (1, 1) for s in states)
        # directions are spread over the four arrival directions
        assert {str(s.last_movement_direction) for s in states} == {
            "north",
            "east",
            "south",
            "west",
        }

    def test_reproducible(self, medium_statespace):
        search = StatespaceSearch(medium_statespace)
        lik = LocationLikelihood(25.0, 20.0, 10.0, 8.0, 0.3)
        first = sample_gaussian_states(search, lik, 30, rng=1)
        second = sample_gaussian_states(search, lik, 30, rng=1)
        assert [s.id for s in first] == [s.id for s in second]

    def test_invalid_count(self, small_statespace):
        search = StatespaceSearch(small_statespace)
        lik = LocationLikelihood(1.0, 1.0, 1.0, 1.0)
        with pytest.raises(InvalidInputError):
            sample_gaussian_states(search, lik, 0)
