"""Observers receive each resampled ensemble from the bootstrap filter.

An observer is any callable ``observer(particles, incremental_log_likelihood)``.
It is called once per filter step, after resampling.
"""

from __future__ import annotations

from collections.abc import Sequence

from ctds.simulation import Particle
from ctds.statespace import State


class NullObserver:
    """Observer that ignores everything; the filter's default."""

    def __call__(self, particles: Sequence[Particle], log_likelihood: float) -> None:
        pass


class FilterObserver:
    """Record the filtering distribution and likelihood increment of each step.

    Particles are mutated by later steps, so the observer stores the States
    they point to.

    Attributes
    ----------
    particle_distributions : list of tuple of State
        Resampled ensemble after each step.
    incremental_log_likelihoods : list of float
        Each step's contribution to the marginal log-likelihood.
    """

    def __init__(self) -> None:
        self.particle_distributions: list[tuple[State, ...]] = []
        self.incremental_log_likelihoods: list[float] = []

    def __call__(self, particles: Sequence[Particle], log_likelihood: float) -> None:
        self.particle_distributions.append(tuple(p.state for p in particles))
        self.incremental_log_likelihoods.append(log_likelihood)
