"""Authentication endpoints.

register, login, logout, request-reset, reset.

Security considerations:
- login: unknown email and wrong password give the same 401, and both run
  one full KDF verification (DUMMY_HASH) so timing does not tell them apart
- request-reset: same answer whether or not the email has an account
- reset: every failure is the same "reset not valid"; success revokes all
  of the user's sessions
"""

from datetime import timedelta

import structlog
from fastapi import APIRouter, Request
from sqlalchemy.exc import IntegrityError

from weatherdesk.api.deps import AppSettings, BearerToken, DbSession, Sessions
from weatherdesk.core.errors import ConflictError, UnauthorizedError
from weatherdesk.core.passwords import (
    DUMMY_HASH,
    hash_password_async,
    verify_password_async,
)
from weatherdesk.core.rate_limiting import limiter
from weatherdesk.core.responses import SuccessResponse
from weatherdesk.repositories.user_repository import UserRepository
from weatherdesk.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RequestResetRequest,
    RequestResetResponse,
    ResetPasswordRequest,
    UserOut,
)
from weatherdesk.services.password_reset import (
    consume_password_reset,
    request_password_reset,
)

logger = structlog.get_logger()

_INVALID_CREDENTIALS_MSG = "invalid credentials"

router = APIRouter()


# ===================================================================
# POST /auth/register
# ===================================================================


@router.post("/register", status_code=201)
@limiter.limit("5/minute")
async def register(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RegisterRequest,
    db: DbSession,
    sessions: Sessions,
) -> AuthResponse:
    """Create an account and sign it in.

    Rate limit: 5 per minute per IP.
    """
    if await UserRepository.get_by_email(db, body.email) is not None:
        raise ConflictError(
            code="EMAIL_ALREADY_EXISTS",
            message="user already exists",
        )

    password_hash = await hash_password_async(body.password)

    try:
        user = await UserRepository.create(
            db, email=body.email, name=body.name, password_hash=password_hash
        )
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same email
        await db.rollback()
        raise ConflictError(
            code="EMAIL_ALREADY_EXISTS",
            message="user already exists",
        ) from exc

    token = sessions.issue(user.id)
    logger.info("User registered", user_id=user.id)
    return AuthResponse(token=token, user=UserOut.model_validate(user.to_public()))


# ===================================================================
# POST /auth/login
# ===================================================================


@router.post("/login")
@limiter.limit("10/minute")
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    db: DbSession,
    sessions: Sessions,
) -> AuthResponse:
    """Verify email + password and issue a bearer token.

    Rate limit: 10 per minute per IP.
    """
    user = await UserRepository.get_by_email(db, body.email)

    if user is None:
        # Security: always pay for one verification to prevent timing attacks.
        await verify_password_async(body.password, DUMMY_HASH)
        raise UnauthorizedError(_INVALID_CREDENTIALS_MSG)

    if not await verify_password_async(body.password, user.password_hash):
        raise UnauthorizedError(_INVALID_CREDENTIALS_MSG)

    token = sessions.issue(user.id)
    return AuthResponse(token=token, user=UserOut.model_validate(user.to_public()))


# ===================================================================
# POST /auth/logout
# ===================================================================


@router.post("/logout")
async def logout(token: BearerToken, sessions: Sessions) -> SuccessResponse:
    """Revoke the presented bearer token. Always succeeds."""
    sessions.revoke(token)
    return SuccessResponse()


# ===================================================================
# POST /auth/request-reset
# ===================================================================


@router.post("/request-reset", response_model_exclude_none=True)
@limiter.limit("5/minute")
async def request_reset(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RequestResetRequest,
    db: DbSession,
    settings: AppSettings,
) -> RequestResetResponse:
    """Issue a password reset token.

    The token travels through the email stand-in (a log line). While
    EXPOSE_RESET_TOKEN is on it is also echoed in the response.

    Rate limit: 5 per minute per IP.
    """
    ticket = await request_password_reset(
        db,
        body.email,
        ttl=timedelta(minutes=settings.reset_token_ttl_minutes),
    )
    await db.commit()

    if ticket is None or not settings.reset_token_exposed:
        return RequestResetResponse()
    return RequestResetResponse(reset_token=ticket.token, expires=ticket.expires)


# ===================================================================
# POST /auth/reset
# ===================================================================


@router.post("/reset")
@limiter.limit("10/minute")
async def reset_password(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: ResetPasswordRequest,
    db: DbSession,
    sessions: Sessions,
) -> SuccessResponse:
    """Set a new password using a reset token.

    Rate limit: 10 per minute per IP.
    """
    user_id = await consume_password_reset(
        db,
        body.email,
        body.reset_token.strip(),
        body.new_password,
    )
    await db.commit()

    revoked = sessions.revoke_user(user_id)
    logger.info("Password reset", user_id=user_id, sessions_revoked=revoked)
    return SuccessResponse()
