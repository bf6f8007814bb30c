"""
Custom exceptions for the statement engine.

Provides a hierarchy of exceptions with error codes for consistent error handling.
Validation failures are never raised; they are reported as violations.
"""
from typing import Any, Dict, Optional


class StatementEngineError(Exception):
    """
    Base exception for all statement engine errors.

    Attributes:
        error_code: Unique error code (e.g., SVE-001)
        message: Human-readable error message
        details: Additional error context
    """
    error_code: str = "SVE-000"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# Configuration Errors (SVE-1XX)
class ConfigurationError(StatementEngineError):
    """Error in engine configuration."""
    error_code = "SVE-100"

    def __init__(self, message: str = "Invalid engine configuration", **kwargs):
        super().__init__(message, **kwargs)


class ChartProfileNotFoundError(ConfigurationError):
    """Requested chart-of-accounts profile does not exist."""
    error_code = "SVE-101"

    def __init__(self, profile: str, available: list, **kwargs):
        message = f"Chart profile '{profile}' not found. Available: {', '.join(available)}"
        super().__init__(message, details={"profile": profile, "available": available}, **kwargs)


class ChartConfigurationError(ConfigurationError):
    """Chart-of-accounts profile is internally inconsistent."""
    error_code = "SVE-102"

    def __init__(self, message: str = "Invalid chart-of-accounts profile", **kwargs):
        super().__init__(message, **kwargs)


# Input Errors (SVE-2XX)
class InvalidAccountCodeError(StatementEngineError):
    """Account code is not a 1-4 digit numeric value."""
    error_code = "SVE-200"

    def __init__(self, code: Any, **kwargs):
        message = f"Invalid account code: {code!r}. Expected up to 4 digits"
        super().__init__(message, details={"code": str(code)}, **kwargs)


class UnsupportedStatementTypeError(StatementEngineError):
    """Statement type is not one of the supported types."""
    error_code = "SVE-201"

    def __init__(self, statement_type: Any, **kwargs):
        message = f"Unsupported statement type: {statement_type!r}"
        super().__init__(message, details={"statement_type": str(statement_type)}, **kwargs)


class MalformedStatementError(StatementEngineError):
    """Statement payload could not be parsed."""
    error_code = "SVE-202"

    def __init__(self, message: str = "Malformed statement payload", **kwargs):
        super().__init__(message, **kwargs)
