"""Proposal operators used by the bootstrap particle filter.

A proposal advances one particle between consecutive filter steps. The
filter takes one proposal per step, so proposals usually come in families
built by :func:`constant_step_family` (discrete time) or
:func:`gillespie_family` (continuous time).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike

from ctds.errors import InvalidInputError
from ctds.simulation.particle import Particle
from ctds.transitions import TransitionModel

__all__ = [
    "DiscreteStepProposal",
    "GillespieProposal",
    "Proposal",
    "constant_step_family",
    "gillespie_family",
]


@runtime_checkable
class Proposal(Protocol):
    """Protocol for operators that move a particle in place."""

    def propose(self, particle: Particle, rng: np.random.Generator) -> None:
        """Advance `particle` using randomness from `rng`."""
        ...


class DiscreteStepProposal:
    """Advance a particle by a fixed number of uniformized steps.

    Parameters
    ----------
    model : TransitionModel
        Uniformized transition model.
    n_steps : int, default=1
        Discrete steps taken per proposal.
    """

    def __init__(self, model: TransitionModel, n_steps: int = 1) -> None:
        if n_steps < 0:
            raise InvalidInputError(f"n_steps must be non-negative, got {n_steps}")
        self.model = model
        self.n_steps = n_steps

    def propose(self, particle: Particle, rng: np.random.Generator) -> None:
        for _ in range(self.n_steps):
            particle.step(self.model, rng)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n_steps={self.n_steps})"


class GillespieProposal:
    """Advance a particle in continuous time from `t` to `t_next`."""

    def __init__(self, model: TransitionModel, t: float, t_next: float) -> None:
        if t_next < t:
            raise InvalidInputError(
                f"t_next ({t_next}) must not precede t ({t})"
            )
        self.model = model
        self.t = float(t)
        self.t_next = float(t_next)

    def propose(self, particle: Particle, rng: np.random.Generator) -> None:
        particle.gillespie(self.t, self.t_next, self.model, rng)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(t={self.t}, t_next={self.t_next})"


def constant_step_family(
    model: TransitionModel, n_proposals: int, n_steps: int = 1
) -> list[DiscreteStepProposal]:
    """`n_proposals` identical discrete-time proposals of `n_steps` steps each."""
    proposal = DiscreteStepProposal(model, n_steps)
    return [proposal] * n_proposals


def gillespie_family(
    model: TransitionModel, time_points: ArrayLike
) -> list[GillespieProposal]:
    """Continuous-time proposals between consecutive `time_points`.

    Returns ``len(time_points) - 1`` proposals.
    """
    times = np.asarray(time_points, dtype=np.float64).ravel()
    return [
        GillespieProposal(model, float(t), float(t_next))
        for t, t_next in zip(times[:-1], times[1:])
    ]
