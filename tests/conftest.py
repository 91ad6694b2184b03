"""Shared test fixtures for the ctds test suite.

Fixture Naming Convention
=========================

**Grid statespace fixtures** follow the pattern:
    {size}_{orientation}_statespace

Where:
    - size: tiny (2x2), small (3x3), medium (6x5)
    - orientation: omitted for increasing axes, ``flipped`` for decreasing
      northings (raster order)

Domain-specific fixtures use descriptive names (e.g. ``masked_statespace``
for a grid with cells excluded by a linear constraint).
"""

import os

import numpy as np
import pytest
from hypothesis import Phase, Verbosity, settings

from ctds import Statespace

# =============================================================================
# Hypothesis Configuration for Performance
# =============================================================================
# - "ci": Fast profile for CI pipelines (fewer examples, no deadline)
# - "dev": Standard development profile (moderate examples)
# - "thorough": Full property testing (many examples, for pre-release)

settings.register_profile(
    "ci",
    max_examples=10,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
    verbosity=Verbosity.quiet,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=5000,
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "thorough",
    max_examples=100,
    deadline=None,
    verbosity=Verbosity.verbose,
)

_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)


def grid_covariates(n_eastings: int, n_northings: int) -> np.ndarray:
    """Two covariates: constant 1 and the flat cell index (eastings fastest)."""
    n_cells = n_eastings * n_northings
    return np.vstack([np.ones(n_cells), np.arange(n_cells, dtype=np.float64)])


# =============================================================================
# --- Fixtures ---
# =============================================================================


@pytest.fixture
def tiny_statespace() -> Statespace:
    """2x2 unit grid with one zero covariate."""
    return Statespace.from_arrays([0.0, 1.0], [0.0, 1.0], np.zeros((1, 4)))


@pytest.fixture
def small_statespace() -> Statespace:
    """3x3 unit grid with one zero covariate (rate 1 everywhere)."""
    return Statespace.from_arrays(
        [0.0, 1.0, 2.0], [0.0, 1.0, 2.0], np.zeros((1, 9))
    )


@pytest.fixture
def medium_statespace() -> Statespace:
    """6x5 grid with 10 m spacing and two covariates."""
    eastings = np.arange(6) * 10.0
    northings = np.arange(5) * 10.0
    return Statespace.from_arrays(eastings, northings, grid_covariates(6, 5))


@pytest.fixture
def small_flipped_statespace() -> Statespace:
    """3x3 grid whose northings decrease with the row index (raster order)."""
    return Statespace.from_arrays(
        [0.0, 1.0, 2.0], [2.0, 1.0, 0.0], grid_covariates(3, 3)
    )


@pytest.fixture
def masked_statespace() -> Statespace:
    """4x4 unit grid with the cell at index (1, 1) excluded.

    Covariates are a constant 1 and an indicator that is -1 at (1, 1); the
    constraint ``[1, 2]`` scores ``1 - 2 < 0`` there and ``1`` elsewhere.
    """
    n_cells = 16
    indicator = np.zeros(n_cells)
    indicator[1 + 1 * 4] = -1.0
    covariates = np.vstack([np.ones(n_cells), indicator])
    return Statespace.from_arrays(
        np.arange(4.0),
        np.arange(4.0),
        covariates,
        linear_constraint=[1.0, 2.0],
    )
