"""Bootstrap particle filtering of latent movement paths.

>>> from ctds.filtering import run_particle_filter, FilterResult  # doctest: +SKIP
"""

from ctds.filtering._result import FilterResult
from ctds.filtering.bootstrap import (
    BootstrapParticleFilter,
    Observer,
    resample_counts,
    run_particle_filter,
)
from ctds.filtering.logspace import log_cumsum, log_sum
from ctds.filtering.observers import FilterObserver, NullObserver

__all__ = [
    "BootstrapParticleFilter",
    "FilterObserver",
    "FilterResult",
    "NullObserver",
    "Observer",
    "log_cumsum",
    "log_sum",
    "resample_counts",
    "run_particle_filter",
]
