"""Password reset tokens.

Flow:
1. request_password_reset() stores a short-lived random token on the user
   row (overwriting any earlier one) and sends it through the email
   stand-in.
2. consume_password_reset() checks the token and expiry, then swaps the
   credential and clears the token in one conditional UPDATE.

Security considerations:
- Unknown emails look exactly like known ones to the caller
- Every rejection raises the same ResetNotValidError, whatever the cause
- Token comparison is constant-time
- A token works once; the conditional UPDATE makes replay lose even when
  two requests race
"""

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from weatherdesk.core.email import send_password_reset_email
from weatherdesk.core.errors import ResetNotValidError
from weatherdesk.core.passwords import hash_password_async
from weatherdesk.models.base import epoch_ms
from weatherdesk.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# 16 random bytes -> 32 hex characters
RESET_TOKEN_BYTES = 16
DEFAULT_RESET_TTL = timedelta(minutes=15)


@dataclass(frozen=True)
class ResetTicket:
    """A freshly issued reset token.

    Attributes:
        user_id: User the token belongs to.
        email: Normalized email address of that user.
        token: Plain reset token.
        expires: Expiry in epoch milliseconds.
    """

    user_id: int
    email: str
    token: str
    expires: int


async def request_password_reset(
    db: AsyncSession,
    email: str,
    *,
    ttl: timedelta = DEFAULT_RESET_TTL,
    now_ms: int | None = None,
) -> ResetTicket | None:
    """Issue a reset token for email.

    Args:
        db: Async database session.
        email: Address the reset was requested for.
        ttl: Token lifetime.
        now_ms: Current time in epoch milliseconds. Defaults to now.

    Returns:
        The issued ticket, or None if no account uses email. Callers must
        answer both cases the same way.
    """
    user = await UserRepository.get_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for unknown email")
        return None

    issued_at = now_ms if now_ms is not None else epoch_ms()
    ticket = ResetTicket(
        user_id=user.id,
        email=user.email,
        token=secrets.token_hex(RESET_TOKEN_BYTES),
        expires=issued_at + int(ttl.total_seconds() * 1000),
    )
    await UserRepository.update(
        db,
        user.id,
        reset_token=ticket.token,
        reset_expires=ticket.expires,
    )

    send_password_reset_email(
        to_email=ticket.email,
        token=ticket.token,
        expires_ms=ticket.expires,
    )
    return ticket


async def consume_password_reset(
    db: AsyncSession,
    email: str,
    token: str,
    new_password: str,
    *,
    now_ms: int | None = None,
) -> int:
    """Replace a user's password using a pending reset token.

    Args:
        db: Async database session.
        email: Account email.
        token: Reset token presented by the caller.
        new_password: Plaintext replacement password (already validated).
        now_ms: Current time in epoch milliseconds. Defaults to now.

    Returns:
        ID of the user whose password changed.

    Raises:
        ResetNotValidError: Unknown email, no pending reset, token mismatch,
            expired token, or a concurrent consumer got there first.
    """
    checked_at = now_ms if now_ms is not None else epoch_ms()

    user = await UserRepository.get_by_email(db, email)
    if user is None or not user.reset_token or user.reset_expires is None:
        raise ResetNotValidError()
    if not hmac.compare_digest(user.reset_token.encode(), token.encode()):
        raise ResetNotValidError()
    if checked_at > user.reset_expires:
        raise ResetNotValidError()

    user_id = user.id
    new_hash = await hash_password_async(new_password)

    consumed = await UserRepository.consume_reset(
        db,
        user_id,
        token=token,
        now_ms=checked_at,
        password_hash=new_hash,
    )
    if not consumed:
        raise ResetNotValidError()

    # The bulk UPDATE bypassed the identity map
    await db.refresh(user)
    logger.info("Password reset completed for user %s", user_id)
    return user_id
