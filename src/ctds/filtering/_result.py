"""FilterResult container for bootstrap particle filter output.

This module provides the FilterResult dataclass which stores the marginal
log-likelihood estimate from a particle filter run, the per-step likelihood
increments and, optionally, the sequence of filtering distributions. Derived
arrays are computed lazily via cached properties on first access.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ctds.errors import InvalidInputError
from ctds.statespace import State


@dataclass
class FilterResult:
    """Output of a bootstrap particle filter run.

    Parameters
    ----------
    log_likelihood : float
        Estimate of the marginal log-likelihood of the observations.
    incremental_log_likelihoods : NDArray[np.float64], shape (n_steps,)
        Contribution of each filter step; sums to `log_likelihood`.
    filtering_distributions : list of tuple of State, optional
        Resampled ensemble after each step. None if not recorded.

    Examples
    --------
    >>> import numpy as np
    >>> result = FilterResult(log_likelihood=-1.5,
    ...                       incremental_log_likelihoods=np.array([-1.0, -0.5]))
    >>> result.n_steps
    2

    Notes
    -----
    The class uses ``@dataclass`` (not frozen) to allow ``@cached_property``.
    Treat instances as immutable: cached arrays are not refreshed if the
    fields are modified.
    """

    log_likelihood: float
    incremental_log_likelihoods: NDArray[np.float64]
    filtering_distributions: list[tuple[State, ...]] | None = None

    @property
    def n_steps(self) -> int:
        return int(len(self.incremental_log_likelihoods))

    @property
    def n_particles(self) -> int:
        """Ensemble size, or 0 if distributions were not recorded."""
        if not self.filtering_distributions:
            return 0
        return len(self.filtering_distributions[0])

    def _require_distributions(self) -> list[tuple[State, ...]]:
        if self.filtering_distributions is None:
            raise InvalidInputError(
                "filtering distributions were not recorded; rerun with "
                "return_filtering_distributions=True"
            )
        return self.filtering_distributions

    @cached_property
    def filtering_coordinates(self) -> NDArray[np.float64]:
        """Particle coordinates per step.

        Returns
        -------
        NDArray[np.float64], shape (n_steps, n_particles, 2)
            ``[..., 0]`` is easting and ``[..., 1]`` northing.
        """
        distributions = self._require_distributions()
        coords = np.empty((len(distributions), self.n_particles, 2))
        for t, ensemble in enumerate(distributions):
            coords[t] = [state.coordinates for state in ensemble]
        return coords

    @cached_property
    def mean_coordinates(self) -> NDArray[np.float64]:
        """Filtering mean location per step, shape (n_steps, 2)."""
        return self.filtering_coordinates.mean(axis=1)

    def to_dataframe(self) -> pd.DataFrame:
        """Long-format table of the filtering distributions.

        Returns
        -------
        pd.DataFrame
            One row per (step, particle) with columns ``step``, ``particle``,
            ``easting``, ``northing``, ``last_movement_direction``, ``state_id``.
        """
        distributions = self._require_distributions()
        records = [
            {
                "step": t,
                "particle": k,
                "easting": state.location.easting,
                "northing": state.location.northing,
                "last_movement_direction": str(state.last_movement_direction),
                "state_id": state.id,
            }
            for t, ensemble in enumerate(distributions)
            for k, state in enumerate(ensemble)
        ]
        return pd.DataFrame.from_records(
            records,
            columns=[
                "step",
                "particle",
                "easting",
                "northing",
                "last_movement_direction",
                "state_id",
            ],
        )
