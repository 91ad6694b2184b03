"""Particle trajectory simulation on a directional statespace.

Two simulators advance a particle between States:

discrete_step
    Uniformized discrete-time chain. With probability ``1 - delta * rate(s)``
    the particle stays put; otherwise it jumps to a successor drawn from the
    transition probabilities.
gillespie_step
    Exact continuous-time simulation between two time points: exponential
    holding times with rate ``rate(s)`` and jumps drawn from the transition
    probabilities, repeated until the next holding time overshoots the end of
    the interval.

All randomness comes from a caller-supplied ``np.random.Generator``; the draw
order within a step is fixed, so a seeded generator reproduces paths exactly.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from ctds.errors import InvalidInputError, InvalidParameterError
from ctds.parameters import MovementParameters
from ctds.statespace import State, Statespace
from ctds.transitions import TransitionModel

__all__ = [
    "Particle",
    "discrete_step",
    "gillespie_step",
    "simulate_continuous",
    "simulate_discrete",
]


@dataclass
class Particle:
    """A particle is a pointer to its current State.

    Simulators move a particle by replacing :attr:`state`; States themselves
    are owned by the statespace and never copied.
    """

    state: State

    def step(self, model: TransitionModel, rng: np.random.Generator) -> None:
        """Advance one uniformized discrete-time step."""
        self.state = discrete_step(self.state, model, rng)

    def gillespie(
        self,
        t: float,
        t_next: float,
        model: TransitionModel,
        rng: np.random.Generator,
    ) -> None:
        """Advance in continuous time from `t` to `t_next`."""
        self.state = gillespie_step(self.state, t, t_next, model, rng)


def _jump(state: State, model: TransitionModel, rng: np.random.Generator) -> State:
    """Draw a successor of `state` by inverting cumulative transition mass."""
    probabilities = model.transition_probabilities(state)
    destinations = model.successors(state)
    p = rng.random()
    cumulative_mass = 0.0
    for destination, mass in zip(destinations, probabilities):
        cumulative_mass += mass
        if cumulative_mass > p:
            return destination
    # rounding can leave the total mass just below p
    return destinations[-1]


def discrete_step(
    state: State, model: TransitionModel, rng: np.random.Generator
) -> State:
    """Take one uniformized discrete-time step from `state`.

    Parameters
    ----------
    state : State
        Current State.
    model : TransitionModel
        Model whose rate is already uniformized, i.e. a per-step probability
        of leaving the State.
    rng : np.random.Generator
        Random source. Draws one uniform, plus one more if the particle moves.

    Returns
    -------
    State
        The State after the step (`state` itself for a self-transition).

    Raises
    ------
    InvalidParameterError
        If the uniformized rate lies outside ``[0, 1]``; choose a smaller
        uniformization scale.
    """
    uniformized_rate = model.transition_rate(state)
    if not 0.0 <= uniformized_rate <= 1.0:
        raise InvalidParameterError(
            f"uniformized rate {uniformized_rate:.6g} at state {state.key} is "
            "outside [0, 1]; reduce delta so that delta * rate <= 1 everywhere"
        )
    if rng.random() < 1.0 - uniformized_rate:
        return state
    return _jump(state, model, rng)


def gillespie_step(
    state: State,
    t: float,
    t_next: float,
    model: TransitionModel,
    rng: np.random.Generator,
) -> State:
    """Simulate continuous-time movement from time `t` to `t_next`.

    May perform zero, one or many jumps depending on the rates along the way
    and the interval length.

    Parameters
    ----------
    state : State
        State occupied at time `t`.
    t, t_next : float
        Start and end of the interval.
    model : TransitionModel
        Model with (non-uniformized) continuous-time rates.
    rng : np.random.Generator
        Random source.

    Returns
    -------
    State
        State occupied at time `t_next`.

    Raises
    ------
    InvalidParameterError
        If a rate along the way is infinite or NaN.
    """
    t += _holding_time(state, model, rng)
    while t < t_next:
        state = _jump(state, model, rng)
        t += _holding_time(state, model, rng)
    return state


def _holding_time(
    state: State, model: TransitionModel, rng: np.random.Generator
) -> float:
    rate = model.transition_rate(state)
    if not np.isfinite(rate) or rate < 0.0:
        raise InvalidParameterError(
            f"transition rate {rate:.6g} at state {state.key} is not a finite "
            "non-negative number; check the scale of beta"
        )
    if rate == 0.0:
        # absorbing: the particle never leaves
        return np.inf
    return rng.exponential(1.0 / rate)


def simulate_discrete(
    statespace: Statespace,
    start_state: State,
    beta: ArrayLike,
    delta: float,
    persistence: float,
    n_steps: int,
    rng: np.random.Generator | int | None = None,
    *,
    cache: bool = False,
) -> list[State]:
    """Forward-simulate a uniformized discrete-time path.

    Parameters
    ----------
    statespace : Statespace
        Statespace to move on.
    start_state : State
        Initial State.
    beta : array-like, shape (n_covariates,)
        Rate coefficients.
    delta : float
        Uniformization scale; ``delta * rate`` must not exceed 1.
    persistence : float
        Directional persistence strength.
    n_steps : int
        Number of steps to simulate.
    rng : np.random.Generator or int, optional
        Random source or seed.
    cache : bool, default=False
        Memoize rates and probabilities per State for this run.

    Returns
    -------
    list of State
        Path of length ``n_steps + 1`` starting with `start_state`.

    Examples
    --------
    >>> import numpy as np
    >>> from ctds import Statespace
    >>> ss = Statespace.from_arrays([0, 1, 2], [0, 1, 2], np.zeros(9))
    >>> path = simulate_discrete(
    ...     ss, ss.state_at("north", 1, 1), beta=[0.0], delta=0.1,
    ...     persistence=0.0, n_steps=10, rng=0,
    ... )
    >>> len(path)
    11
    """
    if n_steps < 0:
        raise InvalidInputError(f"n_steps must be non-negative, got {n_steps}")
    model = MovementParameters(beta, persistence, delta).transition_model(
        statespace, uniformized=True, cache=cache
    )
    rng = np.random.default_rng(rng)
    particle = Particle(start_state)
    path = [particle.state]
    for _ in range(n_steps):
        particle.step(model, rng)
        path.append(particle.state)
    return path


def simulate_continuous(
    statespace: Statespace,
    start_state: State,
    beta: ArrayLike,
    persistence: float,
    time_points: Sequence[float] | ArrayLike,
    rng: np.random.Generator | int | None = None,
    *,
    cache: bool = False,
) -> list[State]:
    """Forward-simulate a continuous-time path observed at `time_points`.

    Parameters
    ----------
    statespace : Statespace
        Statespace to move on.
    start_state : State
        State occupied at ``time_points[0]``.
    beta : array-like, shape (n_covariates,)
        Rate coefficients.
    persistence : float
        Directional persistence strength.
    time_points : array-like, shape (n_times,)
        Non-decreasing observation times.
    rng : np.random.Generator or int, optional
        Random source or seed.
    cache : bool, default=False
        Memoize rates and probabilities per State for this run.

    Returns
    -------
    list of State
        State occupied at each time point (same length as `time_points`).
    """
    times = np.asarray(time_points, dtype=np.float64).ravel()
    if times.size == 0:
        raise InvalidInputError("time_points must contain at least one time")
    if np.any(np.diff(times) < 0):
        raise InvalidInputError("time_points must be non-decreasing")
    model = MovementParameters(beta, persistence).transition_model(
        statespace, cache=cache
    )
    rng = np.random.default_rng(rng)
    particle = Particle(start_state)
    path = [particle.state]
    for t, t_next in zip(times[:-1], times[1:]):
        particle.gillespie(float(t), float(t_next), model, rng)
        path.append(particle.state)
    return path
