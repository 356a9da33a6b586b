"""Password reset notification.

Real email delivery is out of scope: the "email" is a structured log line
carrying the reset token, which an operator (or a developer reading the
console) relays to the user.
"""

from datetime import UTC, datetime

import structlog

from weatherdesk.core.errors import NonFatalError, report_non_fatal

logger = structlog.get_logger()


def _format_expiry(expires_ms: int) -> str:
    return datetime.fromtimestamp(expires_ms / 1000, tz=UTC).isoformat()


def send_password_reset_email(*, to_email: str, token: str, expires_ms: int) -> None:
    """Emit the reset token through the log side channel.

    Best-effort: a failure here is reported as non-fatal and never reaches
    the caller, since the reset itself has already been recorded.

    Args:
        to_email: Recipient email address.
        token: Plain reset token.
        expires_ms: Token expiry in epoch milliseconds.
    """
    try:
        expires_at = _format_expiry(expires_ms)
    except (OverflowError, OSError, ValueError) as exc:
        report_non_fatal(
            NonFatalError(f"Could not format reset expiry: {exc}"),
            task="reset_email",
        )
        return

    logger.info(
        "Password reset email (stand-in)",
        email=to_email,
        token=token,
        expires=expires_at,
    )
