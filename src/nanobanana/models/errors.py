"""Error code definitions and exceptions for nanobanana."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error category codes for generation operations."""

    # Pre-flight validation (never reaches the network)
    INVALID_MODEL = "INVALID_MODEL"
    INVALID_ASPECT = "INVALID_ASPECT"
    INVALID_SIZE = "INVALID_SIZE"

    # Retryable errors (retryable=True)
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK = "NETWORK"

    # Not retryable errors (retryable=False)
    AUTH = "AUTH"
    BAD_REQUEST = "BAD_REQUEST"
    NO_IMAGE_FOUND = "NO_IMAGE_FOUND"
    DECODE = "DECODE"
    ABORTED = "ABORTED"


# Set of retryable error codes
RETRYABLE_ERRORS = {
    ErrorCode.RATE_LIMITED,
    ErrorCode.SERVER_ERROR,
    ErrorCode.NETWORK,
}


def is_retryable(code: ErrorCode) -> bool:
    """Check if an error code indicates a retryable error."""
    return code in RETRYABLE_ERRORS


class ApiError(Exception):
    """Classified failure of a generation call."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status: int | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.original_exception = original_exception

    @property
    def retryable(self) -> bool:
        return is_retryable(self.code)

    def to_generation_error(self):
        """Convert to the serialisable GenerationError record."""
        from nanobanana.models.responses import GenerationError

        return GenerationError(
            code=self.code,
            message=self.message,
            retryable=self.retryable,
            status=self.status,
        )


class InvalidOptionError(ApiError, ValueError):
    """Model, aspect ratio or size rejected before any request is built."""

    def __init__(self, code: ErrorCode, message: str, valid: list[str] | None = None):
        super().__init__(code, message)
        self.valid = valid or []
