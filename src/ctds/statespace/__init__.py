"""Rook directional statespaces: grid cells, directional states and their graph."""

from ctds.statespace._types import Location, State, StateKey
from ctds.statespace.core import Statespace, build_graph
from ctds.statespace.grid import GridAxes
from ctds.statespace.validation import validate_statespace

__all__ = [
    "GridAxes",
    "Location",
    "State",
    "StateKey",
    "Statespace",
    "build_graph",
    "validate_statespace",
]
