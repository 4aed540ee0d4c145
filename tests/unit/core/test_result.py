"""
Unit tests for the Result type.
"""

import pytest

from symtree.core.result import Err, Ok


class TestOk:
    """Successful results."""

    def test_ok_unwraps(self):
        result = Ok(3)
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 3

    def test_ok_compares_by_value(self):
        assert Ok([1, 2]) == Ok([1, 2])


class TestErr:
    """Failed results."""

    def test_err_flags(self):
        result = Err("boom")
        assert result.is_err()
        assert not result.is_ok()
        assert result.error == "boom"

    def test_unwrap_raises(self):
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()
