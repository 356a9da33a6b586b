"""Repository for User CRUD operations.

Provides database access for the users table. Every mutation is a single
flush inside the caller's transaction, so per-record atomicity is delegated
to the database.
"""

import logging
from typing import Any, cast

from sqlalchemy import CursorResult, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from weatherdesk.models.user import User

logger = logging.getLogger(__name__)

# Fields that may be updated via UserRepository.update().
# Security: Never add 'id', 'email', 'created_at', or 'updated_at'.
# - id: primary key, immutable
# - email: unique identity
# - created_at/updated_at: server-managed timestamps
_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "theme",
        "password_hash",
        "reset_token",
        "reset_expires",
    }
)


class UserRepository:
    """Stateless repository for User table operations.

    All methods are static; no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
        """Fetch a user by primary key.

        Args:
            db: Async database session.
            user_id: Integer primary key.

        Returns:
            User if found, None otherwise.
        """
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Fetch a user by email address (case-insensitive).

        Args:
            db: Async database session.
            email: Email address to look up.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.email == email.strip().lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        name: str,
        password_hash: str,
    ) -> User:
        """Create a new user.

        Email is normalized to lowercase before storage.

        Args:
            db: Async database session.
            email: User email address.
            name: Display name.
            password_hash: Credential encoding from hash_password().

        Returns:
            Created User with database-generated fields populated.

        Raises:
            sqlalchemy.exc.IntegrityError: If email already exists.
        """
        user = User(
            email=email.strip().lower(),
            name=name,
            password_hash=password_hash,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def update(
        db: AsyncSession,
        user_id: int,
        **kwargs: str | int | None,
    ) -> User | None:
        """Update user fields.

        Only fields in _UPDATABLE_FIELDS are allowed. Unknown field names
        raise ValueError.

        Args:
            db: Async database session.
            user_id: ID of the user to update.
            **kwargs: Field names and values to update.

        Returns:
            Updated User if found, None if user does not exist.

        Raises:
            ValueError: If an unknown field name is passed.
        """
        unknown = set(kwargs) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Unknown fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        user = await db.get(User, user_id)
        if user is None:
            return None

        for field, value in kwargs.items():
            setattr(user, field, value)

        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def consume_reset(
        db: AsyncSession,
        user_id: int,
        *,
        token: str,
        now_ms: int,
        password_hash: str,
    ) -> bool:
        """Swap the credential and clear the pending reset in one statement.

        The WHERE clause re-checks the token and expiry, so of two concurrent
        consumers of the same token only one matches a row.

        Args:
            db: Async database session.
            user_id: ID of the user being reset.
            token: Reset token the caller presented.
            now_ms: Current time in epoch milliseconds.
            password_hash: New credential encoding.

        Returns:
            True if the row was updated, False if the reset was no longer
            pending (consumed, replaced or expired in the meantime).
        """
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.reset_token == token,
                User.reset_expires >= now_ms,
            )
            .values(
                password_hash=password_hash,
                reset_token=None,
                reset_expires=None,
            )
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult[Any], await db.execute(stmt))
        rows_updated: int = result.rowcount
        updated = rows_updated == 1
        if not updated:
            logger.info("Password reset lost race for user %s", user_id)
        return updated
