"""Custom exceptions for the mint throttle."""

from typing import Any


class MintGateError(Exception):
    """Base class for mint throttle exceptions with a stable error code.

    All custom exceptions should inherit from this class and define
    their specific code for consistent handling by callers.
    """
    code: str = "MINTGATE_ERROR"

    def __init__(self, message: str = "Mint throttle error", details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to a dictionary for logging or API responses."""
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidPolicyError(MintGateError):
    """Raised when the rate limit policy holds a value that cannot be used.

    Carries the offending raw value so callers can report what the
    ledger actually returned.
    """
    code = "INVALID_POLICY"

    def __init__(self, field: str, raw_value: Any, reason: str = "Expected a positive number."):
        self.field = field
        self.raw_value = raw_value
        message = f'Invalid {field} value: "{raw_value}". {reason}'
        super().__init__(message, {"field": field, "raw_value": raw_value})


class InvalidTimestampError(MintGateError):
    """Raised when the last operation timestamp does not parse."""
    code = "INVALID_TIMESTAMP"

    def __init__(self, raw_value: Any, field: str = "lastMint.time"):
        self.field = field
        self.raw_value = raw_value
        message = f'Invalid {field} format: "{raw_value}". Expected ISO 8601 timestamp.'
        super().__init__(message, {"field": field, "raw_value": raw_value})


class WaitAbortedError(MintGateError):
    """Raised when a wait is cancelled before or during a sleep."""
    code = "WAIT_ABORTED"

    def __init__(self, message: str = "Wait operation was aborted"):
        super().__init__(message)


class WaitTimeoutError(MintGateError):
    """Raised when the wait deadline elapses before admission."""
    code = "WAIT_TIMEOUT"

    def __init__(self, max_wait_ms: float):
        self.max_wait_ms = max_wait_ms
        shown = int(max_wait_ms) if float(max_wait_ms).is_integer() else max_wait_ms
        message = f"Maximum wait time of {shown}ms exceeded while waiting for rate limit"
        super().__init__(message, {"max_wait_ms": max_wait_ms})
