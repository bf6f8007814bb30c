"""
Unit tests for custom exceptions.

Tests exception hierarchy and error formatting.
"""
import pytest

from statement_engine.exceptions import (
    ChartConfigurationError,
    ChartProfileNotFoundError,
    ConfigurationError,
    InvalidAccountCodeError,
    MalformedStatementError,
    StatementEngineError,
    UnsupportedStatementTypeError,
)


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_base_exception(self):
        """Test base StatementEngineError."""
        exc = StatementEngineError("Test error")

        assert exc.error_code == "SVE-000"
        assert exc.message == "Test error"
        assert exc.details == {}
        assert str(exc) == "Test error"

    @pytest.mark.parametrize("exc,parent,code", [
        (ChartConfigurationError(), ConfigurationError, "SVE-102"),
        (ChartProfileNotFoundError("x", ["nas_standard"]), ConfigurationError, "SVE-101"),
        (InvalidAccountCodeError("12345"), StatementEngineError, "SVE-200"),
        (UnsupportedStatementTypeError("ledger"), StatementEngineError, "SVE-201"),
        (MalformedStatementError(), StatementEngineError, "SVE-202"),
    ])
    def test_error_codes(self, exc, parent, code):
        """Test subclasses inherit correctly and carry their code."""
        assert isinstance(exc, parent)
        assert isinstance(exc, StatementEngineError)
        assert exc.error_code == code

    def test_custom_error_code(self):
        """Test overriding the error code per instance."""
        exc = MalformedStatementError("bad", error_code="SVE-299")
        assert exc.error_code == "SVE-299"
        assert MalformedStatementError.error_code == "SVE-202"


class TestExceptionFormatting:
    """Tests for exception serialization."""

    def test_to_dict(self):
        """Test conversion to a structured-log friendly dict."""
        exc = InvalidAccountCodeError("12345")
        data = exc.to_dict()

        assert data["error"] is True
        assert data["error_code"] == "SVE-200"
        assert "12345" in data["message"]
        assert data["details"] == {"code": "12345"}

    def test_profile_not_found_lists_available(self):
        """Test the available profiles appear in message and details."""
        exc = ChartProfileNotFoundError("ifrs", ["nas_extended", "nas_standard"])
        assert "nas_extended, nas_standard" in exc.message
        assert exc.details == {"profile": "ifrs", "available": ["nas_extended", "nas_standard"]}
