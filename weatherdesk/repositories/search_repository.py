"""Repository for per-user search history.

Searches are insert-only and read back newest-first.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weatherdesk.models.base import epoch_ms
from weatherdesk.models.search import Search

# Default cap on rows returned by list_for_user()
DEFAULT_HISTORY_LIMIT = 50


class SearchRepository:
    """Stateless repository for Search table operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        user_id: int,
        city: str,
        lang: str = "en",
        created_at: int | None = None,
    ) -> Search:
        """Record one search.

        Args:
            db: Async database session.
            user_id: Owner of the entry.
            city: City text, already trimmed.
            lang: Language tag.
            created_at: Epoch milliseconds. Defaults to now.

        Returns:
            Created Search.
        """
        search = Search(
            user_id=user_id,
            city=city,
            lang=lang,
            created_at=created_at if created_at is not None else epoch_ms(),
        )
        db.add(search)
        await db.flush()
        return search

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        user_id: int,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[Search]:
        """List a user's searches, newest first.

        Ties on created_at (same millisecond) fall back to insertion order,
        newest first.

        Args:
            db: Async database session.
            user_id: Owner of the entries.
            limit: Maximum rows to return.

        Returns:
            Up to limit Search rows.
        """
        stmt = (
            select(Search)
            .where(Search.user_id == user_id)
            .order_by(Search.created_at.desc(), Search.id.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
