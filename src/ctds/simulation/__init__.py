"""Particle trajectory simulation.

>>> import numpy as np
>>> from ctds import Statespace
>>> from ctds.simulation import simulate_continuous
>>> ss = Statespace.from_arrays([0, 1, 2], [0, 1, 2], np.zeros(9))
>>> path = simulate_continuous(
...     ss, ss.state_at("east", 1, 1), beta=[0.0], persistence=1.0,
...     time_points=[0.0, 0.5, 1.0], rng=42,
... )
>>> len(path)
3
"""

from ctds.simulation.particle import (
    Particle,
    discrete_step,
    gillespie_step,
    simulate_continuous,
    simulate_discrete,
)
from ctds.simulation.proposals import (
    DiscreteStepProposal,
    GillespieProposal,
    Proposal,
    constant_step_family,
    gillespie_family,
)

__all__ = [
    "DiscreteStepProposal",
    "GillespieProposal",
    "Particle",
    "Proposal",
    "constant_step_family",
    "discrete_step",
    "gillespie_family",
    "gillespie_step",
    "simulate_continuous",
    "simulate_discrete",
]
