"""Rate limiting configuration using slowapi.

Security: Slows credential stuffing and reset-token guessing by limiting
request frequency on the auth endpoints.

Requests carrying a live bearer session are keyed per user so a shared IP
does not throttle everyone behind it. Everything else falls back to
IP-based keying.

Usage in routers:
    from weatherdesk.core.rate_limiting import limiter

    @router.post("/login")
    @limiter.limit("10/minute")
    async def login(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from weatherdesk.core.responses import ErrorResponse

_BEARER_PREFIX = "bearer "


def bearer_token(request: Request) -> str:
    """Extract the bearer token from the Authorization header ("" if none)."""
    header = request.headers.get("authorization", "")
    if header[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return ""
    return header[len(_BEARER_PREFIX) :].strip()


def _rate_limit_key_func(request: Request) -> str:
    """Get rate limit key from request.

    Key format:
    - Live bearer session: "user:{id}"
    - No/unknown token: "unauth:{ip}"

    Args:
        request: The incoming request.

    Returns:
        Rate limit key string.
    """
    registry = getattr(request.app.state, "sessions", None)
    if registry is not None:
        user_id = registry.resolve(bearer_token(request))
        if user_id is not None:
            return f"user:{user_id}"

    return f"unauth:{get_remote_address(request)}"


# Global limiter instance shared by every app in the process. create_app()
# switches it on or off from RATE_LIMIT_ENABLED; the last app built wins.
# Configured with in-memory storage (suitable for single-instance deployment)
# For multi-instance, configure Redis storage via RATELIMIT_STORAGE_URL
limiter = Limiter(key_func=_rate_limit_key_func)


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Returns 429 Too Many Requests with the standard error envelope.

    Args:
        request: The incoming request.
        exc: The rate limit exception.

    Returns:
        JSONResponse with 429 status and retry-after header.
    """
    # Parse retry-after from exception detail (e.g., "10 per 1 minute")
    # Fallback to 60 seconds if parsing fails
    try:
        retry_after = str(exc.detail.split()[-1])
        int(retry_after.rstrip("s"))
    except (ValueError, AttributeError, IndexError):
        retry_after = "60"

    return JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=f"Rate limit exceeded: {exc.detail}",
            code="RATE_LIMITED",
        ).to_content(),
        headers={"Retry-After": retry_after},
    )
