"""
Tests for the user store and the public projection.
"""

from datetime import datetime, timezone

import pytest

from database.models import User
from database.users import USER_ID_PREFIX, UserRepository, profile_to_columns
from utils.errors import ConflictError
from utils.schemas import map_user_to_api


async def _create(session_factory, username="alice", email="alice@x.com", profile=None):
    async with session_factory() as session:
        user = await UserRepository(session).create(username, email, "hash", profile=profile)
        await session.commit()
        return user


class TestCreateAndFind:
    @pytest.mark.asyncio
    async def test_create_assigns_prefixed_id_and_timestamps(self, session_factory):
        user = await _create(session_factory)
        assert user.id.startswith(USER_ID_PREFIX)
        assert user.created_at == user.updated_at

    @pytest.mark.asyncio
    async def test_find_by_identifier_matches_username_or_email(self, session_factory):
        user = await _create(session_factory)
        async with session_factory() as session:
            repo = UserRepository(session)
            assert (await repo.find_by_identifier("alice")).id == user.id
            assert (await repo.find_by_identifier("alice@x.com")).id == user.id
            assert await repo.find_by_identifier("bob") is None

    @pytest.mark.asyncio
    async def test_find_by_identifier_never_merges_records(self, session_factory):
        first = await _create(session_factory, username="carol", email="carol@x.com")
        await _create(session_factory, username="dave", email="carol")
        async with session_factory() as session:
            found = await UserRepository(session).find_by_identifier("carol")
        assert found.id == first.id
        assert found.email == "carol@x.com"

    @pytest.mark.asyncio
    async def test_find_by_id(self, session_factory):
        user = await _create(session_factory)
        async with session_factory() as session:
            repo = UserRepository(session)
            assert (await repo.find_by_id(user.id)).username == "alice"
            assert await repo.find_by_id("usr_missing") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username, email",
        [("alice", "other@x.com"), ("other", "alice@x.com")],
    )
    async def test_duplicate_create_conflicts(self, session_factory, username, email):
        await _create(session_factory)
        with pytest.raises(ConflictError):
            await _create(session_factory, username=username, email=email)

    @pytest.mark.asyncio
    async def test_store_rejects_duplicate_after_passing_precheck(self, session_factory):
        """Two registrations that both passed the pre-check: exactly one wins."""
        async with session_factory() as first, session_factory() as second:
            repo_a, repo_b = UserRepository(first), UserRepository(second)
            assert await repo_b.find_conflict(username="alice", email="alice@x.com") is None
            # hand the connection back before the other session needs it
            await second.commit()

            assert await repo_a.find_conflict(username="alice", email="alice@x.com") is None
            await repo_a.create("alice", "alice@x.com", "hash-a")
            await first.commit()

            with pytest.raises(ConflictError):
                await repo_b.create("alice", "alice@x.com", "hash-b")

        async with session_factory() as session:
            assert (await UserRepository(session).find_by_identifier("alice")).password_hash == "hash-a"


class TestFindConflict:
    @pytest.mark.asyncio
    async def test_excludes_given_id(self, session_factory):
        user = await _create(session_factory)
        async with session_factory() as session:
            repo = UserRepository(session)
            assert await repo.find_conflict(email="alice@x.com", exclude_id=user.id) is None
            assert (await repo.find_conflict(email="alice@x.com")).id == user.id
            assert await repo.find_conflict() is None


class TestUpdate:
    @pytest.mark.asyncio
    async def test_only_supplied_fields_change(self, session_factory):
        user = await _create(session_factory, profile={"givenName": "Alice", "familyName": "Liddell"})
        async with session_factory() as session:
            repo = UserRepository(session)
            updated = await repo.update(user.id, {"family_name": "Smith"})
            await session.commit()

        assert updated.given_name == "Alice"
        assert updated.family_name == "Smith"
        assert updated.username == "alice"
        assert updated.updated_at is not None

    @pytest.mark.asyncio
    async def test_updated_at_refreshed(self, session_factory):
        user = await _create(session_factory)
        async with session_factory() as session:
            repo = UserRepository(session)
            stored = await repo.find_by_id(user.id)
            stored.updated_at = datetime(2000, 1, 1, tzinfo=timezone.utc)
            updated = await repo.update(user.id, {})
        assert updated.updated_at > datetime(2000, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_unknown_id_returns_none(self, session_factory):
        async with session_factory() as session:
            assert await UserRepository(session).update("usr_missing", {"username": "x"}) is None

    @pytest.mark.asyncio
    async def test_unknown_column_rejected(self, session_factory):
        user = await _create(session_factory)
        async with session_factory() as session:
            with pytest.raises(ValueError):
                await UserRepository(session).update(user.id, {"password_hash": "x"})

    @pytest.mark.asyncio
    async def test_update_into_existing_email_conflicts(self, session_factory):
        await _create(session_factory)
        bob = await _create(session_factory, username="bob", email="bob@x.com")
        async with session_factory() as session:
            with pytest.raises(ConflictError):
                await UserRepository(session).update(bob.id, {"email": "alice@x.com"})


class TestProfileColumns:
    def test_only_present_keys_are_returned(self):
        assert profile_to_columns({"givenName": "A"}) == {"given_name": "A"}
        assert profile_to_columns(None) == {}

    def test_empty_values_clear(self):
        columns = profile_to_columns({"avatarUrl": "", "address": {"city": None, "postalCode": "75001"}})
        assert columns == {"avatar_url": None, "address_city": None, "address_postal_code": "75001"}


def _user(**fields):
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    base = dict(
        id="usr_1",
        username="alice",
        email="alice@x.com",
        password_hash="$argon2id$secret",
        created_at=now,
        updated_at=now,
    )
    base.update(fields)
    return User(**base)


class TestPublicProjection:
    def test_hash_never_included(self):
        out = map_user_to_api(_user())
        assert "password_hash" not in out
        assert "passwordHash" not in out
        assert "$argon2id$secret" not in out.values()

    def test_profile_absent_when_all_fields_empty(self):
        assert "profile" not in map_user_to_api(_user(given_name="", address_city=None))

    def test_profile_present_with_only_set_fields(self):
        out = map_user_to_api(_user(family_name="Liddell", address_country="UK"))
        assert out["profile"] == {"familyName": "Liddell", "address": {"country": "UK"}}

    def test_timestamps_are_utc_iso(self):
        out = map_user_to_api(_user(updated_at=datetime(2024, 5, 1, 12, 0, 0, 123000)))
        assert out["createdAt"] == "2024-05-01T12:00:00.000Z"
        assert out["updatedAt"] == "2024-05-01T12:00:00.123Z"
