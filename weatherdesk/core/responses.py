"""Response envelope models.

Errors use a flat envelope: {"error": "<message>", "code": "<CODE>"},
with optional field-level "details" for validation failures.
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    Attributes:
        error: Human-readable error message.
        code: Machine-readable error code (e.g., "NOT_FOUND").
        details: Optional list of field-level errors (for validation).

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message, code=exc.code).to_content(),
        )
    """

    error: str
    code: str
    details: list[dict] | None = None

    def to_content(self) -> dict:
        """Serialize, dropping details when there are none."""
        return self.model_dump(exclude_none=True)


class SuccessResponse(BaseModel):
    """Body for endpoints that only acknowledge an action."""

    success: bool = True
