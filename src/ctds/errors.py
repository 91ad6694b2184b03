"""Exceptions raised by the ctds engine.

Every error carries a stable error code that prefixes its message, e.g.
``[E2002] no state with last_movement_direction='north' at index (0, 0)``.
The codes make failures easy to search for in logs and in an outer scripting
environment that only sees the message text.

Error kinds
-----------
InvalidInputError (E2001)
    Malformed construction input: non-monotonic coordinate vectors, mismatched
    lengths, fewer than two grid points per axis, inconsistent observation
    sequences.
NotFoundError (E2002)
    Lookup of a grid index, state key or direction that does not exist.
InvalidParameterError (E2003)
    Model parameters outside their valid range, e.g. a uniformized rate outside
    ``[0, 1]`` or a non-positive standard deviation.
DegenerateFilterError (E2004)
    All importance weights were exactly zero at some filter step.

Each class also inherits from the closest builtin exception so callers can catch
``ValueError``/``KeyError``/``RuntimeError`` as usual.
"""

from __future__ import annotations


class CTDSError(Exception):
    """Base class for all errors raised by ctds.

    Parameters
    ----------
    message : str
        Human readable description of the failure.
    error_code : str, optional
        Overrides the class default error code.
    """

    error_code: str = "E2000"

    def __init__(self, message: str, error_code: str | None = None) -> None:
        if error_code is not None:
            self.error_code = error_code
        self.message = message
        super().__init__(f"[{self.error_code}] {message}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return f"[{self.error_code}] {self.message}"


class InvalidInputError(CTDSError, ValueError):
    """Raised when construction inputs violate their preconditions."""

    error_code = "E2001"


class NotFoundError(CTDSError, KeyError):
    """Raised when a location, state or direction lookup has no match."""

    error_code = "E2002"


class InvalidParameterError(CTDSError, ValueError):
    """Raised when model parameters fall outside their valid range."""

    error_code = "E2003"


class DegenerateFilterError(CTDSError, RuntimeError):
    """Raised when every importance weight is zero at a filter step.

    Parameters
    ----------
    step : int
        Zero-based index of the filter step at which the weights collapsed.
    n_particles : int
        Size of the particle ensemble.
    """

    error_code = "E2004"

    def __init__(self, step: int, n_particles: int) -> None:
        self.step = step
        self.n_particles = n_particles
        super().__init__(
            f"all {n_particles} importance weights are zero at filter step "
            f"{step}; the marginal log-likelihood is -inf. The observations may "
            "be incompatible with the initial ensemble or the movement model."
        )


class StatespaceValidationError(ValueError):
    """Raised when a statespace graph has inconsistent structure.

    This indicates a bug in graph construction, not a user error: a correctly
    built statespace always passes validation.

    See Also
    --------
    ctds.statespace.validation.validate_statespace : Main validation function
    """

    pass
