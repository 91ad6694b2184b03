"""Local transition model for directional persistence CTDS movement.

Movement away from a State is described by two pieces:

- a total transition rate, log-linear in the covariates of the State's
  location: ``rate(s) = exp(beta @ x_location)``, and
- a categorical distribution over the State's successors, a softmax of the
  directional persistence covariate scaled by the persistence strength:
  ``p(s') proportional to exp(persistence * cov(s.direction, s'.direction))``.

Evaluators follow two small protocols so they can be stacked: a
:class:`UniformizedRate` scales another rate evaluator, and
:class:`CachedRate`/:class:`CachedProbabilities` memoize another evaluator in
a :class:`StateCache` side-table keyed by ``State.id``.

Cache invalidation is the caller's job. Cached values depend on the model
parameters; after changing `beta`, `delta` or `persistence` (or swapping the
wrapped evaluator) call :meth:`StateCache.invalidate_all` before reusing the
cache, otherwise stale values are returned silently.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ctds.directions import PERSISTENCE_COVARIATES
from ctds.errors import InvalidInputError, InvalidParameterError
from ctds.statespace import State, Statespace

logger = logging.getLogger(__name__)

__all__ = [
    "CachedProbabilities",
    "CachedRate",
    "DirectionalProbabilities",
    "LocationBasedRate",
    "StateCache",
    "TransitionModel",
    "TransitionProbabilityEvaluator",
    "TransitionRateEvaluator",
    "UniformizedRate",
]


@runtime_checkable
class TransitionRateEvaluator(Protocol):
    """Protocol for objects that compute the total rate of leaving a State."""

    def transition_rate(self, state: State) -> float:
        """Return the rate of leaving `state`."""
        ...


@runtime_checkable
class TransitionProbabilityEvaluator(Protocol):
    """Protocol for objects that compute successor probabilities.

    The returned vector is aligned with ``statespace.successors(state)``.
    """

    def probabilities(self, state: State) -> NDArray[np.float64]:
        """Return the probability of moving to each successor of `state`."""
        ...


class LocationBasedRate:
    """Log-linear transition rate ``exp(beta @ x_location)``.

    The rate ignores the State's last movement direction.

    Parameters
    ----------
    beta : array-like, shape (n_covariates,)
        Rate coefficients.
    """

    def __init__(self, beta: ArrayLike) -> None:
        self.beta = np.asarray(beta, dtype=np.float64)

    def transition_rate(self, state: State) -> float:
        return float(np.exp(self.beta @ state.location.covariates))


class UniformizedRate:
    """Scale another rate evaluator by a constant ``delta``.

    Discrete-time simulation reads ``delta * rate(s)`` as the probability of
    leaving `s` in one step, so `delta` should keep it within ``[0, 1]``.

    Parameters
    ----------
    evaluator : TransitionRateEvaluator
        Base rate evaluator.
    scale : float
        Positive uniformization constant.
    """

    def __init__(self, evaluator: TransitionRateEvaluator, scale: float) -> None:
        if not (np.isfinite(scale) and scale > 0):
            raise InvalidParameterError(
                f"uniformization scale must be positive and finite, got {scale}"
            )
        self.evaluator = evaluator
        self.scale = float(scale)

    def transition_rate(self, state: State) -> float:
        return self.scale * self.evaluator.transition_rate(state)


class DirectionalProbabilities:
    """Successor probabilities driven by directional persistence only.

    Parameters
    ----------
    statespace : Statespace
        Statespace providing successor tuples.
    persistence : float
        Persistence strength. 0 gives uniform probabilities over successors.

    Examples
    --------
    >>> import numpy as np
    >>> from ctds import Statespace
    >>> ss = Statespace.from_arrays([0, 1, 2], [0, 1, 2], np.zeros(9))
    >>> probs = DirectionalProbabilities(ss, persistence=0.0)
    >>> probs.probabilities(ss.state_at("north", 1, 1))
    array([0.25, 0.25, 0.25, 0.25])
    """

    def __init__(self, statespace: Statespace, persistence: float) -> None:
        self.statespace = statespace
        self.persistence = float(persistence)

    def probabilities(self, state: State) -> NDArray[np.float64]:
        destinations = self.statespace.successors(state)
        if not destinations:
            raise InvalidInputError(
                f"state {state.key} has no outgoing transitions"
            )
        directions = np.fromiter(
            (d.last_movement_direction for d in destinations),
            dtype=np.intp,
            count=len(destinations),
        )
        log_mass = (
            self.persistence
            * PERSISTENCE_COVARIATES[state.last_movement_direction, directions]
        )
        # shift before exponentiating so large |persistence| cannot overflow
        mass = np.exp(log_mass - log_mass.max())
        return mass / mass.sum()


class StateCache:
    """Side-table of per-State transition rates and probabilities.

    Unset rates hold the sentinel ``-1``; unset probabilities hold None.

    Parameters
    ----------
    n_states : int
        Number of States in the statespace the cache serves.
    """

    UNSET_RATE = -1.0

    def __init__(self, n_states: int) -> None:
        self.rates = np.full(n_states, self.UNSET_RATE)
        self.probabilities: list[NDArray[np.float64] | None] = [None] * n_states

    @property
    def n_states(self) -> int:
        return len(self.rates)

    @property
    def n_cached_rates(self) -> int:
        return int(np.count_nonzero(self.rates >= 0))

    @property
    def n_cached_probabilities(self) -> int:
        return sum(p is not None for p in self.probabilities)

    def invalidate_all(self) -> None:
        """Reset every entry to its unset sentinel."""
        self.rates.fill(self.UNSET_RATE)
        self.probabilities = [None] * len(self.rates)
        logger.debug("Invalidated transition cache for %d states", len(self.rates))


class CachedRate:
    """Memoize a rate evaluator per State in a :class:`StateCache`.

    Replacing :attr:`evaluator` does not clear the cache.
    """

    def __init__(self, evaluator: TransitionRateEvaluator, cache: StateCache) -> None:
        self.evaluator = evaluator
        self.cache = cache

    def transition_rate(self, state: State) -> float:
        rate = self.cache.rates[state.id]
        if rate < 0:
            rate = self.evaluator.transition_rate(state)
            self.cache.rates[state.id] = rate
        return float(rate)


class CachedProbabilities:
    """Memoize a probability evaluator per State in a :class:`StateCache`.

    Replacing :attr:`evaluator` does not clear the cache.
    """

    def __init__(
        self, evaluator: TransitionProbabilityEvaluator, cache: StateCache
    ) -> None:
        self.evaluator = evaluator
        self.cache = cache

    def probabilities(self, state: State) -> NDArray[np.float64]:
        probs = self.cache.probabilities[state.id]
        if probs is None:
            probs = self.evaluator.probabilities(state)
            self.cache.probabilities[state.id] = probs
        return probs


class TransitionModel:
    """Rate and successor probabilities used to move particles on a statespace.

    Parameters
    ----------
    statespace : Statespace
        Statespace the model acts on.
    rate : TransitionRateEvaluator
        Total rate of leaving a State (uniformized or not).
    probabilities : TransitionProbabilityEvaluator
        Successor probabilities aligned with ``statespace.successors``.
    cache : StateCache, optional
        Side-table used by `rate`/`probabilities` when they are cached
        evaluators, exposed so :meth:`invalidate_all` can reset it.
    """

    def __init__(
        self,
        statespace: Statespace,
        rate: TransitionRateEvaluator,
        probabilities: TransitionProbabilityEvaluator,
        cache: StateCache | None = None,
    ) -> None:
        self.statespace = statespace
        self.rate = rate
        self.probabilities = probabilities
        self.cache = cache

    @classmethod
    def from_parameters(
        cls,
        statespace: Statespace,
        beta: ArrayLike,
        persistence: float = 0.0,
        delta: float | None = None,
        cache: bool = False,
    ) -> TransitionModel:
        """Assemble a model from raw parameters.

        Parameters
        ----------
        statespace : Statespace
            Statespace the model acts on.
        beta : array-like, shape (n_covariates,)
            Rate coefficients.
        persistence : float, default=0.0
            Directional persistence strength.
        delta : float, optional
            If given, rates are uniformized by this scale.
        cache : bool, default=False
            Memoize rates and probabilities per State.
        """
        rate: TransitionRateEvaluator = LocationBasedRate(beta)
        if delta is not None:
            rate = UniformizedRate(rate, delta)
        probabilities: TransitionProbabilityEvaluator = DirectionalProbabilities(
            statespace, persistence
        )
        state_cache = None
        if cache:
            state_cache = StateCache(statespace.n_states)
            rate = CachedRate(rate, state_cache)
            probabilities = CachedProbabilities(probabilities, state_cache)
        return cls(statespace, rate, probabilities, state_cache)

    def transition_rate(self, state: State) -> float:
        return self.rate.transition_rate(state)

    def transition_probabilities(self, state: State) -> NDArray[np.float64]:
        return self.probabilities.probabilities(state)

    def successors(self, state: State) -> tuple[State, ...]:
        return self.statespace.successors(state)

    def invalidate_all(self) -> None:
        """Clear cached values; a no-op for uncached models."""
        if self.cache is not None:
            self.cache.invalidate_all()
