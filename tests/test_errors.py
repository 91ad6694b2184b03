"""Tests for error codes in ctds exceptions."""

import pytest

from ctds.errors import (
    CTDSError,
    DegenerateFilterError,
    InvalidInputError,
    InvalidParameterError,
    NotFoundError,
)


class TestErrorCodes:
    """Every error kind carries a stable code in its message."""

    @pytest.mark.parametrize(
        ("error_class", "code", "builtin"),
        [
            (InvalidInputError, "E2001", ValueError),
            (NotFoundError, "E2002", KeyError),
            (InvalidParameterError, "E2003", ValueError),
        ],
    )
    def test_code_and_builtin_base(self, error_class, code, builtin):
        error = error_class("something went wrong")
        assert isinstance(error, CTDSError)
        assert isinstance(error, builtin)
        assert error.error_code == code
        assert str(error) == f"[{code}] something went wrong"

    def test_not_found_message_not_quoted(self):
        """KeyError subclasses keep the plain message text."""
        assert str(NotFoundError("no such state")) == "[E2002] no such state"

    def test_error_code_override(self):
        error = InvalidInputError("custom", error_code="E2999")
        assert str(error) == "[E2999] custom"
        assert InvalidInputError.error_code == "E2001"

    def test_degenerate_filter_error(self):
        error = DegenerateFilterError(step=3, n_particles=50)
        assert isinstance(error, RuntimeError)
        assert error.step == 3
        assert error.n_particles == 50
        assert str(error).startswith("[E2004]")
        assert "step 3" in str(error)

    def test_catchable_as_base(self):
        with pytest.raises(CTDSError):
            raise InvalidParameterError("bad")
