"""Search model - per-user city search history."""

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from weatherdesk.models.base import Base

if TYPE_CHECKING:
    from weatherdesk.models.user import User

LANGUAGES: tuple[str, ...] = ("en", "ru")


class Search(Base):
    """One city lookup recorded for a user. Insert-only.

    Attributes:
        id: Integer primary key.
        user_id: Owning user. Rows are deleted with the user.
        city: City text as the user typed it (trimmed).
        lang: Language tag used for the lookup.
        created_at: Insert time in epoch milliseconds.
    """

    __tablename__ = "searches"
    __table_args__ = (
        Index("idx_searches_user_time", "user_id", text("created_at DESC")),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    city: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    lang: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
        default="en",
        server_default=text("'en'"),
    )
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="searches",
    )

    def to_history_item(self) -> dict:
        """Shape returned by GET /history."""
        return {
            "city": self.city,
            "lang": self.lang,
            "created_at": self.created_at,
        }
