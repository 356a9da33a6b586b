"""API error classes.

Every error that reaches a client is an APIError subclass. The exception
handlers in main.py turn them into the {"error": message, "code": CODE}
envelope with the subclass's HTTP status.

NonFatalError is the odd one out: it marks best-effort work (the reset
notification stand-in, reading an upstream error body) whose failure is
logged and never surfaced.
"""

import structlog

logger = structlog.get_logger()


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    The message names the offending field.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required or credentials rejected (401)."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ResetNotValidError(APIError):
    """Password reset token rejected (400).

    Missing, mismatched, expired and already-consumed tokens all produce
    this same error so callers cannot tell them apart.
    """

    def __init__(self) -> None:
        super().__init__(
            code="RESET_NOT_VALID",
            message="reset not valid",
            status_code=400,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Duplicate or conflicting resource (409).

    Accepts custom code for specific conflict types.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details,
        )


class UpstreamError(APIError):
    """Weather provider call failed (500).

    Attributes:
        upstream_status: HTTP status returned by the provider, or None when
            the request never completed (timeout, connection error).
    """

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(
            code="UPSTREAM_ERROR",
            message=message,
            status_code=500,
        )


class ConfigurationError(APIError):
    """Server is missing required configuration (500).

    The message tells the operator what to set.
    """

    def __init__(self, message: str) -> None:
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=message,
            status_code=500,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )


class NonFatalError(Exception):
    """Failure of a best-effort side task.

    Raised inside helpers whose outcome does not affect the response, then
    passed to report_non_fatal().
    """


def report_non_fatal(exc: BaseException, **context: object) -> None:
    """Log a best-effort failure at warning level and carry on.

    Args:
        exc: The failure. Non-NonFatalError exceptions are logged the same way.
        **context: Extra key/value pairs for the log event.
    """
    logger.warning(
        "Non-fatal error",
        error=str(exc),
        error_type=type(exc).__name__,
        **context,
    )
