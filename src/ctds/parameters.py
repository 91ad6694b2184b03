"""Movement model parameters.

MovementParameters collects the three quantities that define a directional
persistence CTDS model and builds the matching transition model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from ctds.errors import InvalidParameterError

if TYPE_CHECKING:
    from ctds.statespace import Statespace
    from ctds.transitions import TransitionModel


@dataclass(frozen=True, eq=False)
class MovementParameters:
    """Parameters of a directional persistence movement model.

    Parameters
    ----------
    beta : array-like, shape (n_covariates,)
        Coefficients of the log-linear transition rate
        ``exp(beta @ x_location)``.
    persistence : float, default=0.0
        Strength of directional persistence. 0 gives a random walk, positive
        values favor continuing straight, negative values favor reversing.
    delta : float, optional
        Uniformization scale used by discrete-time simulation; ``delta *
        rate`` is the per-step probability of leaving a state.

    Examples
    --------
    >>> params = MovementParameters(beta=[0.5, -1.0], persistence=2.0, delta=0.1)
    >>> params.beta
    array([ 0.5, -1. ])
    """

    beta: ArrayLike
    persistence: float = 0.0
    delta: float | None = None

    def __post_init__(self) -> None:
        """Coerce and validate parameters."""
        beta = np.array(self.beta, dtype=np.float64, ndmin=1)
        beta.setflags(write=False)
        object.__setattr__(self, "beta", beta)
        object.__setattr__(self, "persistence", float(self.persistence))
        if self.delta is not None:
            object.__setattr__(self, "delta", float(self.delta))

        if self.beta.ndim != 1:
            raise InvalidParameterError(
                f"beta must be 1-D (got shape {self.beta.shape})"
            )
        if not np.all(np.isfinite(self.beta)):
            raise InvalidParameterError("beta contains NaN or infinite values")
        if not np.isfinite(self.persistence):
            raise InvalidParameterError(
                f"persistence must be finite, got {self.persistence}"
            )
        if self.delta is not None and not (
            np.isfinite(self.delta) and self.delta > 0
        ):
            raise InvalidParameterError(
                f"delta must be positive and finite, got {self.delta}"
            )

    def transition_model(
        self,
        statespace: Statespace,
        *,
        uniformized: bool = False,
        cache: bool = False,
    ) -> TransitionModel:
        """Build the transition model these parameters define on `statespace`.

        Parameters
        ----------
        statespace : Statespace
            Statespace the model acts on.
        uniformized : bool, default=False
            Scale rates by `delta` for discrete-time simulation.
        cache : bool, default=False
            Memoize rates and probabilities per State.

        Raises
        ------
        InvalidParameterError
            If `uniformized` is requested without `delta`, or `beta` does not
            match the number of covariates.
        """
        from ctds.transitions import TransitionModel

        if len(self.beta) != statespace.n_covariates:
            raise InvalidParameterError(
                f"beta has {len(self.beta)} entries but the statespace has "
                f"{statespace.n_covariates} covariates"
            )
        if uniformized and self.delta is None:
            raise InvalidParameterError(
                "delta is required for a uniformized transition model"
            )
        return TransitionModel.from_parameters(
            statespace,
            beta=self.beta,
            persistence=self.persistence,
            delta=self.delta if uniformized else None,
            cache=cache,
        )
