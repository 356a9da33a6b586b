"""User model - account, credential, theme and pending password reset."""

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, CheckConstraint, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from weatherdesk.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from weatherdesk.models.search import Search

THEMES: tuple[str, ...] = ("system", "light", "dark")
DEFAULT_THEME = "system"


class User(Base, TimestampMixin):
    """Registered user.

    Attributes:
        id: Integer primary key.
        email: Unique, stored lowercase.
        name: Display name.
        password_hash: Credential encoding from core.passwords.hash_password().
        theme: UI theme preference: system, light or dark.
        reset_token: Pending password reset token. NULL when none is pending.
        reset_expires: Reset token expiry in epoch milliseconds.
        created_at: Account creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "theme IN ('system', 'light', 'dark')",
            name="ck_users_theme",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    theme: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=DEFAULT_THEME,
        server_default=text("'system'"),
    )
    reset_token: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )
    reset_expires: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    # Relationships
    searches: Mapped[list["Search"]] = relationship(
        "Search",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_public(self) -> dict:
        """Fields safe to return to the account owner."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "theme": self.theme,
        }
