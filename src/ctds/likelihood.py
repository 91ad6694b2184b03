"""Observation likelihoods for projected location error.

Location observations (e.g. Argos or GPS fixes) are modeled with a bivariate
normal error distribution on projected coordinates, following the error
ellipse parameterization of McClintock et al. (2015, doi:10.1111/2041-210X.12311).

A likelihood is one of two variants:

FlatLikelihood
    Log-density 0 everywhere; stands in for time steps without an observation.
LocationLikelihood
    Bivariate normal centred on the observed coordinates, parameterized by two
    standard deviations and a correlation.

A *likelihood family* is a sequence with one entry per discrete time step,
with FlatLikelihood at steps lacking an observation.
:func:`log_likelihood` evaluates either variant against a State, Particle or
Location.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ctds.errors import InvalidInputError, InvalidParameterError
from ctds.statespace import Location, State

__all__ = [
    "FlatLikelihood",
    "Likelihood",
    "LocationLikelihood",
    "likelihood_family",
    "likelihood_family_from_ellipses",
    "likelihood_family_from_gps",
    "log_likelihood",
    "sample_location",
    "sample_locations",
]


@dataclass(frozen=True)
class FlatLikelihood:
    """Likelihood for a time step without an observation (log-density 0)."""


@dataclass(frozen=True)
class LocationLikelihood:
    """Bivariate normal likelihood for a projected location observation.

    Use :meth:`from_ellipse` or :meth:`from_hdop_uere` rather than the raw
    constructor when working from telemetry error descriptions.

    Parameters
    ----------
    easting, northing : float
        Observed coordinates (the distribution mean).
    sd_easting, sd_northing : float
        Positive standard deviations along each axis.
    rho : float
        Correlation between easting and northing errors, in ``(-1, 1)``.

    Raises
    ------
    InvalidParameterError
        If a standard deviation is not positive and finite, or ``|rho| >= 1``.
    """

    easting: float
    northing: float
    sd_easting: float
    sd_northing: float
    rho: float = 0.0

    def __post_init__(self) -> None:
        """Validate distribution parameters."""
        for name in ("sd_easting", "sd_northing"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise InvalidParameterError(
                    f"{name} must be positive and finite, got {value}"
                )
        if not (math.isfinite(self.rho) and -1 < self.rho < 1):
            raise InvalidParameterError(
                f"rho must lie strictly between -1 and 1, got {self.rho}"
            )

    @classmethod
    def from_ellipse(
        cls,
        easting: float,
        northing: float,
        semi_major: float,
        semi_minor: float,
        orientation: float,
    ) -> LocationLikelihood:
        """Parameterize from an error ellipse.

        Parameters
        ----------
        easting, northing : float
            Observed coordinates.
        semi_major, semi_minor : float
            Ellipse semi-axis lengths.
        orientation : float
            Ellipse orientation in degrees.

        Examples
        --------
        A circular ellipse gives independent errors whatever its orientation:

        >>> lik = LocationLikelihood.from_ellipse(0.0, 0.0, 2.0, 2.0, 37.0)
        >>> round(lik.sd_easting, 6), round(lik.sd_northing, 6), lik.rho
        (1.414214, 1.414214, 0.0)
        """
        major_sq_half = semi_major * semi_major / 2
        minor_sq_half = semi_minor * semi_minor / 2

        theta = math.radians(orientation)
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)

        sd_easting = math.sqrt(major_sq_half * sin_t**2 + minor_sq_half * cos_t**2)
        sd_northing = math.sqrt(major_sq_half * cos_t**2 + minor_sq_half * sin_t**2)
        if sd_easting <= 0 or sd_northing <= 0:
            raise InvalidParameterError(
                f"error ellipse (semi_major={semi_major}, semi_minor={semi_minor}, "
                f"orientation={orientation}) gives a zero standard deviation"
            )
        rho = (
            (major_sq_half - minor_sq_half) * cos_t * sin_t / sd_easting / sd_northing
        )
        return cls(float(easting), float(northing), sd_easting, sd_northing, rho)

    @classmethod
    def from_hdop_uere(
        cls, easting: float, northing: float, hdop: float, uere: float
    ) -> LocationLikelihood:
        """Parameterize isotropic GPS error from HDOP and UERE.

        ``sd_easting = sd_northing = hdop * uere / sqrt(2)`` and ``rho = 0``.
        """
        sd = hdop * uere / math.sqrt(2)
        return cls(float(easting), float(northing), sd, sd, 0.0)

    @property
    def log_normalizer(self) -> float:
        """``-log(2 pi sd_e sd_n) - log(1 - rho^2) / 2``."""
        return -math.log(
            2 * math.pi * self.sd_easting * self.sd_northing
        ) - 0.5 * math.log(1 - self.rho**2)

    def log_density(self, easting: float, northing: float) -> float:
        """Log-density of the error distribution at projected coordinates."""
        # only residual magnitudes enter the quadratic form
        zx = -abs((easting - self.easting) / self.sd_easting)
        zy = -abs((northing - self.northing) / self.sd_northing)
        q = zx * zx - 2 * self.rho * zx * zy + zy * zy
        return -q / 2 / (1 - self.rho**2) + self.log_normalizer


Likelihood = Union[FlatLikelihood, LocationLikelihood]


def _as_location(target: Any) -> Location:
    """Resolve a Location, State or Particle to its Location."""
    if isinstance(target, Location):
        return target
    if isinstance(target, State):
        return target.location
    state = getattr(target, "state", None)
    if isinstance(state, State):
        return state.location
    raise InvalidInputError(
        f"cannot evaluate a likelihood against {type(target).__name__}; "
        "expected a Location, State or Particle"
    )


def log_likelihood(likelihood: Likelihood, target: Any) -> float:
    """Evaluate a likelihood against a State, Particle or Location.

    Parameters
    ----------
    likelihood : FlatLikelihood or LocationLikelihood
        Likelihood for one time step.
    target : Location, State or Particle
        Where the animal is hypothesized to be.

    Returns
    -------
    float
        Log-likelihood of the observation given the target's location.
    """
    match likelihood:
        case FlatLikelihood():
            return 0.0
        case LocationLikelihood():
            location = _as_location(target)
            return likelihood.log_density(location.easting, location.northing)
        case _:
            raise InvalidInputError(
                f"unknown likelihood type {type(likelihood).__name__}"
            )


def sample_location(
    likelihood: LocationLikelihood, rng: np.random.Generator
) -> tuple[float, float]:
    """Draw one coordinate pair from a location likelihood.

    The easting is drawn from its marginal, then the northing from its normal
    conditional distribution given the easting.
    """
    if not isinstance(likelihood, LocationLikelihood):
        raise InvalidInputError(
            f"cannot sample coordinates from {type(likelihood).__name__}"
        )
    easting = rng.normal(likelihood.easting, likelihood.sd_easting)
    conditional_mean = likelihood.northing + (
        likelihood.rho
        * likelihood.sd_northing
        / likelihood.sd_easting
        * (easting - likelihood.easting)
    )
    conditional_sd = likelihood.sd_northing * math.sqrt(1 - likelihood.rho**2)
    northing = rng.normal(conditional_mean, conditional_sd)
    return float(easting), float(northing)


def sample_locations(
    likelihood: LocationLikelihood,
    n_samples: int,
    rng: np.random.Generator | int | None = None,
) -> NDArray[np.float64]:
    """Draw `n_samples` coordinate pairs; returns shape ``(n_samples, 2)``."""
    rng = np.random.default_rng(rng)
    samples = np.empty((n_samples, 2))
    for k in range(n_samples):
        samples[k] = sample_location(likelihood, rng)
    return samples


def _check_observed_indices(
    observed_indices: ArrayLike, n_observations: int, n_steps: int
) -> NDArray[np.int_]:
    indices = np.asarray(observed_indices, dtype=np.int64).ravel()
    if len(indices) != n_observations:
        raise InvalidInputError(
            f"got {n_observations} observations but {len(indices)} observed indices"
        )
    if len(indices) and (indices[0] < 0 or indices[-1] >= n_steps):
        raise InvalidInputError(
            f"observed indices must lie in [0, {n_steps}), got range "
            f"[{indices.min()}, {indices.max()}]"
        )
    if np.any(np.diff(indices) <= 0):
        raise InvalidInputError("observed indices must be strictly increasing")
    return indices


def likelihood_family(
    observations: Sequence[LocationLikelihood],
    observed_indices: ArrayLike,
    n_steps: int,
) -> list[Likelihood]:
    """Place observation likelihoods on a discrete time grid.

    Parameters
    ----------
    observations : sequence of LocationLikelihood
        One likelihood per observation, in time order.
    observed_indices : array-like of int
        Zero-based time step of each observation, strictly increasing.
    n_steps : int
        Total number of discrete time steps.

    Returns
    -------
    list of Likelihood
        Length `n_steps`, FlatLikelihood at unobserved steps.

    Examples
    --------
    >>> obs = [LocationLikelihood.from_hdop_uere(0.0, 0.0, 1.0, 1.0)]
    >>> [type(lik).__name__ for lik in likelihood_family(obs, [1], 3)]
    ['FlatLikelihood', 'LocationLikelihood', 'FlatLikelihood']
    """
    indices = _check_observed_indices(observed_indices, len(observations), n_steps)
    family: list[Likelihood] = [FlatLikelihood()] * n_steps
    for index, observation in zip(indices, observations):
        family[int(index)] = observation
    return family


def likelihood_family_from_ellipses(
    eastings: ArrayLike,
    northings: ArrayLike,
    semi_majors: ArrayLike,
    semi_minors: ArrayLike,
    orientations: ArrayLike,
    observed_indices: ArrayLike,
    n_steps: int,
) -> list[Likelihood]:
    """Likelihood family from error-ellipse observations (e.g. Argos)."""
    columns = [
        np.asarray(c, dtype=np.float64).ravel()
        for c in (eastings, northings, semi_majors, semi_minors, orientations)
    ]
    if len({len(c) for c in columns}) != 1:
        raise InvalidInputError(
            "eastings, northings, semi_majors, semi_minors and orientations "
            "must have equal lengths"
        )
    observations = [
        LocationLikelihood.from_ellipse(*map(float, row)) for row in zip(*columns)
    ]
    return likelihood_family(observations, observed_indices, n_steps)


def likelihood_family_from_gps(
    eastings: ArrayLike,
    northings: ArrayLike,
    hdops: ArrayLike,
    uere: float,
    observed_indices: ArrayLike,
    n_steps: int,
) -> list[Likelihood]:
    """Likelihood family from GPS fixes with per-fix HDOP and a common UERE."""
    columns = [
        np.asarray(c, dtype=np.float64).ravel() for c in (eastings, northings, hdops)
    ]
    if len({len(c) for c in columns}) != 1:
        raise InvalidInputError(
            "eastings, northings and hdops must have equal lengths"
        )
    observations = [
        LocationLikelihood.from_hdop_uere(float(e), float(n), float(h), uere)
        for e, n, h in zip(*columns)
    ]
    return likelihood_family(observations, observed_indices, n_steps)
