"""Tests for bridge_e2e.utils.errors: error message extraction."""

from __future__ import annotations

from bridge_e2e.utils.errors import get_error_message


class TestGetErrorMessage:
    """Tests for get_error_message()."""

    def test_exception_with_message(self) -> None:
        assert get_error_message(ValueError("something broke")) == "something broke"

    def test_exception_without_message(self) -> None:
        assert get_error_message(TimeoutError()) == "TimeoutError"

    def test_custom_exception(self) -> None:
        class CollaboratorError(Exception):
            pass

        assert get_error_message(CollaboratorError("click failed")) == "click failed"

    def test_non_exception(self) -> None:
        assert get_error_message("a string") == "Unknown error"

    def test_none(self) -> None:
        assert get_error_message(None) == "Unknown error"
