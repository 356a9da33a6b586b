"""Tests for UserRepository and SearchRepository against SQLite."""

import pytest
from sqlalchemy.exc import IntegrityError

from weatherdesk.repositories.search_repository import SearchRepository
from weatherdesk.repositories.user_repository import UserRepository

_HASH = "pbkdf2$sha256$1$00$00"


class TestUserRepository:
    async def test_create_normalizes_email_and_defaults_theme(self, db_session):
        user = await UserRepository.create(
            db_session, email="Bob@Example.COM", name="Bob", password_hash=_HASH
        )
        assert user.id is not None
        assert user.email == "bob@example.com"
        assert user.theme == "system"
        assert user.reset_token is None

    async def test_get_by_email_is_case_insensitive(self, db_session):
        created = await UserRepository.create(
            db_session, email="bob@example.com", name="Bob", password_hash=_HASH
        )
        found = await UserRepository.get_by_email(db_session, "BOB@example.com")
        assert found is not None
        assert found.id == created.id

    async def test_duplicate_email_raises_integrity_error(self, db_session):
        await UserRepository.create(
            db_session, email="bob@example.com", name="Bob", password_hash=_HASH
        )
        with pytest.raises(IntegrityError):
            await UserRepository.create(
                db_session, email="BOB@example.com", name="Bobby", password_hash=_HASH
            )

    async def test_update_allowed_fields(self, db_session):
        user = await UserRepository.create(
            db_session, email="bob@example.com", name="Bob", password_hash=_HASH
        )
        updated = await UserRepository.update(db_session, user.id, theme="dark")
        assert updated is not None
        assert updated.theme == "dark"

    async def test_update_rejects_unknown_fields(self, db_session):
        user = await UserRepository.create(
            db_session, email="bob@example.com", name="Bob", password_hash=_HASH
        )
        with pytest.raises(ValueError, match="email"):
            await UserRepository.update(db_session, user.id, email="x@example.com")

    async def test_update_missing_user_returns_none(self, db_session):
        assert await UserRepository.update(db_session, 999, theme="dark") is None

    async def test_consume_reset_is_single_use(self, db_session):
        user = await UserRepository.create(
            db_session, email="bob@example.com", name="Bob", password_hash=_HASH
        )
        await UserRepository.update(
            db_session, user.id, reset_token="tok", reset_expires=2000
        )

        first = await UserRepository.consume_reset(
            db_session, user.id, token="tok", now_ms=1000, password_hash="new"
        )
        second = await UserRepository.consume_reset(
            db_session, user.id, token="tok", now_ms=1000, password_hash="newer"
        )

        assert first is True
        assert second is False

    async def test_consume_reset_respects_expiry(self, db_session):
        user = await UserRepository.create(
            db_session, email="bob@example.com", name="Bob", password_hash=_HASH
        )
        await UserRepository.update(
            db_session, user.id, reset_token="tok", reset_expires=2000
        )
        assert not await UserRepository.consume_reset(
            db_session, user.id, token="tok", now_ms=2001, password_hash="new"
        )


class TestSearchRepository:
    @pytest.fixture
    async def user_id(self, db_session) -> int:
        user = await UserRepository.create(
            db_session, email="carol@example.com", name="Carol", password_hash=_HASH
        )
        return user.id

    async def test_list_is_newest_first(self, db_session, user_id):
        await SearchRepository.create(
            db_session, user_id=user_id, city="Paris", created_at=1000
        )
        await SearchRepository.create(
            db_session, user_id=user_id, city="Moscow", lang="ru", created_at=3000
        )
        await SearchRepository.create(
            db_session, user_id=user_id, city="Berlin", created_at=2000
        )

        rows = await SearchRepository.list_for_user(db_session, user_id)

        assert [r.city for r in rows] == ["Moscow", "Berlin", "Paris"]
        assert rows[0].to_history_item() == {
            "city": "Moscow",
            "lang": "ru",
            "created_at": 3000,
        }

    async def test_same_millisecond_falls_back_to_insert_order(
        self, db_session, user_id
    ):
        for city in ("A", "B", "C"):
            await SearchRepository.create(
                db_session, user_id=user_id, city=city, created_at=5000
            )
        rows = await SearchRepository.list_for_user(db_session, user_id)
        assert [r.city for r in rows] == ["C", "B", "A"]

    async def test_list_capped_at_limit(self, db_session, user_id):
        for i in range(55):
            await SearchRepository.create(
                db_session, user_id=user_id, city=f"City {i}", created_at=i
            )

        rows = await SearchRepository.list_for_user(db_session, user_id)

        assert len(rows) == 50
        assert rows[0].city == "City 54"
        assert rows[-1].city == "City 5"

    async def test_list_only_returns_own_entries(self, db_session, user_id):
        other = await UserRepository.create(
            db_session, email="dave@example.com", name="Dave", password_hash=_HASH
        )
        await SearchRepository.create(db_session, user_id=other.id, city="Oslo")
        assert await SearchRepository.list_for_user(db_session, user_id) == []

    async def test_created_at_defaults_to_now(self, db_session, user_id):
        search = await SearchRepository.create(db_session, user_id=user_id, city="Rome")
        assert search.created_at > 1_600_000_000_000
