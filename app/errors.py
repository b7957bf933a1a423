"""
Error kinds surfaced by the session operations.
"""
from typing import Optional


class SanitizerError(Exception):
    """
    Base error for load, process and export failures.

    Attributes:
        code: stable error code returned to API clients
        message: user-facing message
        status_code: HTTP status code to return
    """

    code = "SANITIZER_ERROR"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class DecodeError(SanitizerError):
    """Raised when an uploaded file cannot be read as CSV."""

    code = "DECODE_ERROR"
    status_code = 422


class ValidationError(SanitizerError):
    """Raised when an operation's preconditions are not met."""

    code = "VALIDATION_ERROR"
    status_code = 400


class CompileError(SanitizerError):
    """Raised if the forbidden-word pattern cannot be compiled. Indicates a bug."""

    code = "COMPILE_ERROR"
    status_code = 500
