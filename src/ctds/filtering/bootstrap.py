"""Bootstrap particle filter for directional persistence CTDS models.

Implements Algorithm 1 (bootstrap filter) of Michaud et al. (2021,
doi:10.18637/jss.v100.i03). Each step proposes new particle States by forward
simulation, weights particles by the step's observation likelihood, adds the
log of the average weight to the marginal log-likelihood, and resamples the
ensemble multinomially.

Random draws happen in a fixed order: per step, first every proposal in
ensemble order, then the sequential binomial resampling draws in ensemble
order. A seeded generator therefore reproduces a run exactly.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

import numpy as np
from numpy.typing import NDArray

from ctds.errors import DegenerateFilterError, InvalidInputError
from ctds.filtering._result import FilterResult
from ctds.filtering.logspace import log_sum
from ctds.filtering.observers import FilterObserver, NullObserver
from ctds.likelihood import Likelihood, log_likelihood
from ctds.parameters import MovementParameters
from ctds.simulation import Particle, Proposal, constant_step_family
from ctds.statespace import State, Statespace

logger = logging.getLogger(__name__)

Observer = Callable[[Sequence[Particle], float], None]

__all__ = ["BootstrapParticleFilter", "Observer", "resample_counts", "run_particle_filter"]


def resample_counts(
    weights: NDArray[np.float64], rng: np.random.Generator
) -> NDArray[np.int64]:
    """Draw multinomial resampling counts by sequential conditional binomials.

    Particle ``i`` (except the last) receives
    ``Binomial(remaining, w_i / (1 - sum_{k<i} w_k))`` copies; the last particle
    receives all remaining slots.

    Parameters
    ----------
    weights : NDArray[np.float64], shape (n_particles,)
        Normalized weights summing to 1.
    rng : np.random.Generator
        Random source.

    Returns
    -------
    NDArray[np.int64], shape (n_particles,)
        Copies of each particle; sums to ``n_particles``.
    """
    n_particles = len(weights)
    counts = np.zeros(n_particles, dtype=np.int64)
    remaining = n_particles
    cumulative = 0.0
    for i in range(n_particles - 1):
        if remaining == 0:
            break
        p = weights[i]
        if p > 0:
            leftover = 1.0 - cumulative
            conditional = 1.0 if leftover <= p else p / leftover
            n = int(rng.binomial(remaining, conditional))
            counts[i] = n
            remaining -= n
        cumulative += p
    counts[-1] += remaining
    return counts


class BootstrapParticleFilter:
    """Sequential importance resampling over an ensemble of particles.

    Parameters
    ----------
    particles : sequence of Particle or State
        Initial ensemble of size M. Particles are copied; the inputs are not
        mutated.

    Examples
    --------
    >>> import numpy as np
    >>> from ctds import Statespace, MovementParameters
    >>> from ctds.likelihood import FlatLikelihood
    >>> from ctds.simulation import constant_step_family
    >>> ss = Statespace.from_arrays([0, 1, 2], [0, 1, 2], np.zeros(9))
    >>> model = MovementParameters([0.0], delta=0.1).transition_model(
    ...     ss, uniformized=True
    ... )
    >>> pf = BootstrapParticleFilter([ss.state_at("north", 1, 1)])
    >>> pf.marginal_log_likelihood(
    ...     constant_step_family(model, 5), [FlatLikelihood()] * 5, rng=1
    ... )
    0.0
    """

    def __init__(self, particles: Sequence[Particle | State]) -> None:
        if len(particles) == 0:
            raise InvalidInputError("the initial ensemble must not be empty")
        self.initial_states: tuple[State, ...] = tuple(
            p.state if isinstance(p, Particle) else p for p in particles
        )

    @property
    def n_particles(self) -> int:
        return len(self.initial_states)

    def marginal_log_likelihood(
        self,
        proposals: Sequence[Proposal],
        likelihoods: Sequence[Likelihood],
        rng: np.random.Generator | int | None = None,
        observer: Observer | None = None,
    ) -> float:
        """Estimate the marginal log-likelihood of the observations.

        Parameters
        ----------
        proposals : sequence of Proposal
            One proposal per filter step.
        likelihoods : sequence of Likelihood
            One likelihood per filter step; same length as `proposals`.
        rng : np.random.Generator or int, optional
            Random source or seed.
        observer : callable, optional
            Called as ``observer(particles, incremental_log_likelihood)`` after
            each resampling. Defaults to :class:`NullObserver`.

        Returns
        -------
        float
            Marginal log-likelihood estimate.

        Raises
        ------
        InvalidInputError
            If `proposals` and `likelihoods` differ in length.
        DegenerateFilterError
            If every importance weight is zero at some step.
        """
        if len(proposals) != len(likelihoods):
            raise InvalidInputError(
                f"got {len(proposals)} proposals but {len(likelihoods)} "
                "likelihoods; the sequences must have equal lengths"
            )
        rng = np.random.default_rng(rng)
        observer = NullObserver() if observer is None else observer

        n_particles = self.n_particles
        log_m = math.log(n_particles)
        active = [Particle(state) for state in self.initial_states]
        log_weights = np.empty(n_particles)
        ll = 0.0

        for step, (proposal, likelihood) in enumerate(zip(proposals, likelihoods)):
            for k, particle in enumerate(active):
                proposal.propose(particle, rng)
                log_weights[k] = log_likelihood(likelihood, particle) - log_m

            log_mass = log_sum(log_weights)
            if not log_mass > -np.inf:
                raise DegenerateFilterError(step, n_particles)

            counts = resample_counts(np.exp(log_weights - log_mass), rng)
            n_distinct_before = len({p.state.id for p in active})
            active = [
                Particle(particle.state)
                for particle, count in zip(active, counts)
                for _ in range(count)
            ]
            if n_distinct_before > 1 and len({p.state.id for p in active}) == 1:
                logger.warning(
                    "Filter step %d: resampling collapsed %d particles onto a "
                    "single state",
                    step,
                    n_particles,
                )

            ll_t = log_mass - log_m
            ll += ll_t
            logger.debug("Filter step %d: log-likelihood increment %.6g", step, ll_t)
            observer(active, ll_t)

        return ll

    def run(
        self,
        proposals: Sequence[Proposal],
        likelihoods: Sequence[Likelihood],
        rng: np.random.Generator | int | None = None,
        observer: Observer | None = None,
        return_filtering_distributions: bool = True,
    ) -> FilterResult:
        """Run the filter and collect a :class:`FilterResult`.

        Parameters are as for :meth:`marginal_log_likelihood`; `observer`, if
        given, is called in addition to the internal recorder.
        """
        recorder = FilterObserver()

        def observe(particles: Sequence[Particle], ll_t: float) -> None:
            recorder(particles, ll_t)
            if observer is not None:
                observer(particles, ll_t)

        ll = self.marginal_log_likelihood(proposals, likelihoods, rng, observe)
        logger.info(
            "Particle filter finished: %d steps, %d particles, log-likelihood %.6g",
            len(proposals),
            self.n_particles,
            ll,
        )
        return FilterResult(
            log_likelihood=ll,
            incremental_log_likelihoods=np.asarray(
                recorder.incremental_log_likelihoods, dtype=np.float64
            ),
            filtering_distributions=(
                recorder.particle_distributions
                if return_filtering_distributions
                else None
            ),
        )


def run_particle_filter(
    statespace: Statespace,
    initial_states: Sequence[State | Particle],
    likelihoods: Sequence[Likelihood],
    params: MovementParameters,
    rng: np.random.Generator | int | None = None,
    *,
    proposals: Sequence[Proposal] | None = None,
    n_steps_per_proposal: int = 1,
    observer: Observer | None = None,
    return_filtering_distributions: bool = True,
) -> FilterResult:
    """Fit-ready particle filter for a directional persistence CTDS model.

    Builds a fresh cached, uniformized transition model from `params` (so no
    values from earlier parameterizations are reused), one discrete-time
    proposal of `n_steps_per_proposal` steps per likelihood, and runs the
    bootstrap filter.

    Parameters
    ----------
    statespace : Statespace
        Statespace the initial States belong to.
    initial_states : sequence of State or Particle
        Initial ensemble, e.g. from :func:`ctds.search.sample_gaussian_states`.
    likelihoods : sequence of Likelihood
        Likelihood family, one entry per filter step.
    params : MovementParameters
        Model parameters; `delta` is required unless `proposals` is given.
    rng : np.random.Generator or int, optional
        Random source or seed.
    proposals : sequence of Proposal, optional
        Custom proposals (e.g. :func:`ctds.simulation.gillespie_family`); must
        match `likelihoods` in length.
    n_steps_per_proposal : int, default=1
        Discrete steps taken by each default proposal.
    observer : callable, optional
        Extra per-step observer.
    return_filtering_distributions : bool, default=True
        Keep the resampled ensembles in the result.

    Returns
    -------
    FilterResult
    """
    if proposals is None:
        model = params.transition_model(statespace, uniformized=True, cache=True)
        proposals = constant_step_family(model, len(likelihoods), n_steps_per_proposal)
    return BootstrapParticleFilter(initial_states).run(
        proposals,
        likelihoods,
        rng=rng,
        observer=observer,
        return_filtering_distributions=return_filtering_distributions,
    )
