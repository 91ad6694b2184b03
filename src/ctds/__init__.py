"""Continuous-time discrete-space movement models with directional persistence.

**ctds** discretizes a landscape into a rook grid, builds a statespace whose
nodes pair each grid cell with the direction used to arrive there, simulates
movement on it, and estimates the marginal likelihood of noisy telemetry
with a bootstrap particle filter.

Core Classes (Top-Level Exports)
--------------------------------
Statespace : Grid Locations, directional States and their transition graph
StatespaceSearch : Nearest-location index and state reverse lookup
MovementParameters : beta / persistence / delta of a movement model
CardinalDirection : north, east, south, west

Submodules
----------
transitions : Transition rates, persistence probabilities, per-state caches
likelihood : Location observation likelihoods and likelihood families
simulation : Discrete-time and Gillespie particle simulators, proposals
filtering : Bootstrap particle filter and its results
errors : Exception hierarchy with error codes

Examples
--------
>>> import numpy as np
>>> from ctds import Statespace, MovementParameters
>>> from ctds.likelihood import likelihood_family_from_gps
>>> from ctds.filtering import run_particle_filter
>>> ss = Statespace.from_arrays(np.arange(5.0), np.arange(5.0), np.zeros((1, 25)))
>>> likelihoods = likelihood_family_from_gps([2.0], [2.0], [1.0], 2.0, [3], 4)
>>> start = [ss.state_at("north", 2, 2)] * 10
>>> result = run_particle_filter(
...     ss, start, likelihoods, MovementParameters([0.0], delta=0.1), rng=0
... )
>>> result.filtering_coordinates.shape
(4, 10, 2)
"""

from ctds.directions import CardinalDirection
from ctds.errors import (
    CTDSError,
    DegenerateFilterError,
    InvalidInputError,
    InvalidParameterError,
    NotFoundError,
    StatespaceValidationError,
)
from ctds.parameters import MovementParameters
from ctds.search import StatespaceSearch, build_spatial_index
from ctds.statespace import Location, State, Statespace, build_graph

__version__ = "0.1.0"

__all__ = [
    "CTDSError",
    "CardinalDirection",
    "DegenerateFilterError",
    "InvalidInputError",
    "InvalidParameterError",
    "Location",
    "MovementParameters",
    "NotFoundError",
    "State",
    "Statespace",
    "StatespaceSearch",
    "StatespaceValidationError",
    "build_graph",
    "build_spatial_index",
]
