"""Spatial searches over a statespace.

StatespaceSearch maps continuous coordinates to the nearest grid Location with
a KD-tree and keeps a reverse index from each Location to the States anchored
there. It is also used to draw initial particle ensembles around an observed
location.
"""

from __future__ import annotations

import logging
from collections import defaultdict

import numpy as np
from numpy.typing import ArrayLike
from scipy.spatial import cKDTree

from ctds.errors import InvalidInputError, NotFoundError
from ctds.likelihood import LocationLikelihood, sample_location
from ctds.statespace import Location, State, Statespace

logger = logging.getLogger(__name__)

__all__ = ["StatespaceSearch", "build_spatial_index", "sample_gaussian_states"]


class StatespaceSearch:
    """Nearest-neighbor index over the Locations of a statespace.

    Parameters
    ----------
    statespace : Statespace
        Statespace to index.

    Examples
    --------
    >>> import numpy as np
    >>> from ctds import Statespace
    >>> ss = Statespace.from_arrays([0.0, 1.0, 2.0], [0.0, 1.0], np.zeros(6))
    >>> search = StatespaceSearch(ss)
    >>> search.nearest_location(1.2, 0.9).index
    (1, 1)
    """

    def __init__(self, statespace: Statespace) -> None:
        self.statespace = statespace

        by_location: dict[Location, list[State]] = defaultdict(list)
        for state in statespace.states:
            by_location[state.location].append(state)

        # only locations that anchor at least one state are reachable targets
        self._locations: tuple[Location, ...] = tuple(
            loc for loc in statespace.locations if loc in by_location
        )
        self._states_by_location: dict[Location, tuple[State, ...]] = {
            loc: tuple(sorted(by_location[loc], key=lambda s: s.key))
            for loc in self._locations
        }
        self._tree = cKDTree(
            np.array([loc.coordinates for loc in self._locations], dtype=np.float64)
        )
        logger.debug("Indexed %d locations", len(self._locations))

    @property
    def locations(self) -> tuple[Location, ...]:
        return self._locations

    def nearest_location(
        self, easting: float, northing: float, return_distance: bool = False
    ) -> Location | tuple[Location, float]:
        """Return the Location closest to ``(easting, northing)``.

        Parameters
        ----------
        easting, northing : float
            Query coordinates.
        return_distance : bool, default=False
            Also return the Euclidean distance to the Location.

        Returns
        -------
        Location or (Location, float)
        """
        distance, index = self._tree.query([easting, northing], k=1)
        location = self._locations[int(index)]
        if return_distance:
            return location, float(distance)
        return location

    def map_locations(self, points: ArrayLike) -> list[Location]:
        """Vectorized :meth:`nearest_location` for an ``(n, 2)`` array."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise InvalidInputError(
                f"points must have shape (n, 2), got {points.shape}"
            )
        _, indices = self._tree.query(points, k=1)
        return [self._locations[int(i)] for i in np.atleast_1d(indices)]

    def states_at(self, location: Location) -> frozenset[State]:
        """Return the States anchored at `location` (between 1 and 4)."""
        return frozenset(self.ordered_states_at(location))

    def ordered_states_at(self, location: Location) -> tuple[State, ...]:
        """States anchored at `location`, ordered by ``(direction, i, j)``."""
        try:
            return self._states_by_location[location]
        except KeyError:
            raise NotFoundError(
                f"location at grid index {location.index} anchors no states in "
                "this statespace"
            ) from None


def build_spatial_index(statespace: Statespace) -> StatespaceSearch:
    """Build a :class:`StatespaceSearch` for `statespace`."""
    return StatespaceSearch(statespace)


def sample_gaussian_states(
    search: StatespaceSearch,
    likelihood: LocationLikelihood,
    n: int,
    rng: np.random.Generator | int | None = None,
) -> list[State]:
    """Sample States around a location observation.

    Each draw samples coordinates from `likelihood`, snaps them to the nearest
    Location and picks one of the States anchored there uniformly at random,
    i.e. the last movement direction is uniform over those available.

    Parameters
    ----------
    search : StatespaceSearch
        Spatial index of the target statespace.
    likelihood : LocationLikelihood
        Distribution of the initial location.
    n : int
        Number of States to draw.
    rng : np.random.Generator or int, optional
        Random source or seed.

    Returns
    -------
    list of State
        Usable as an initial particle ensemble.
    """
    if n < 1:
        raise InvalidInputError(f"n must be at least 1, got {n}")
    rng = np.random.default_rng(rng)
    states: list[State] = []
    for _ in range(n):
        easting, northing = sample_location(likelihood, rng)
        candidates = search.ordered_states_at(
            search.nearest_location(easting, northing)
        )
        pick = int(np.floor(rng.uniform(0, len(candidates))))
        states.append(candidates[min(pick, len(candidates) - 1)])
    return states
