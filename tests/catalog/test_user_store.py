"""
Tests for the credential store and password hashing.
"""

import pytest
from sqlalchemy import func, select

from catalog import users
from catalog.models import Role, User
from catalog.users import (
    ADMINISTRATOR, CUSTOMER, UserStore,
    check_password, hash_password, validate_password,
)


class TestPasswordHashing:

    def test_hash_is_salted(self):
        first = hash_password("Reader#42")
        second = hash_password("Reader#42")
        assert first != second
        assert "Reader#42" not in first

    def test_check_password(self):
        encoded = hash_password("Reader#42", iterations=1000)
        assert check_password("Reader#42", encoded)
        assert not check_password("reader#42", encoded)

    @pytest.mark.parametrize("encoded", ["", "plain", "md5$1$salt$abc", "pbkdf2_sha256$x$salt$abc"])
    def test_malformed_hash_never_matches(self, encoded):
        assert check_password("Reader#42", encoded) is False

    def test_policy(self):
        assert validate_password("Reader#42") == []
        assert len(validate_password("reader")) == 3
        assert any("non alphanumeric" in error for error in validate_password("Reader42"))


class TestUserStore:

    @pytest.mark.asyncio
    async def test_create_and_verify(self, db_session):
        store = UserStore(db_session)
        result = await store.create("Reader@Bookstore.com", "Reader#42")
        assert result.succeeded
        assert result.errors == []

        user = await store.verify("reader@bookstore.com", "Reader#42")
        assert user is not None
        assert user.email == "Reader@Bookstore.com"
        assert await store.get_roles(user) == [CUSTOMER]

    @pytest.mark.asyncio
    async def test_password_is_not_stored(self, db_session):
        store = UserStore(db_session)
        await store.create("reader@bookstore.com", "Reader#42")
        user = await store.find_by_email("reader@bookstore.com")
        assert user.password_hash.startswith("pbkdf2_sha256$")
        assert "Reader#42" not in user.password_hash

    @pytest.mark.asyncio
    async def test_wrong_password(self, db_session):
        store = UserStore(db_session)
        await store.create("reader@bookstore.com", "Reader#42")
        assert await store.verify("reader@bookstore.com", "Reader#43") is None
        assert await store.verify("nobody@bookstore.com", "Reader#42") is None

    @pytest.mark.asyncio
    async def test_duplicate_email_creates_no_second_identity(self, db_session):
        store = UserStore(db_session)
        assert (await store.create("reader@bookstore.com", "Reader#42")).succeeded

        result = await store.create("READER@bookstore.com", "Other#123")
        assert not result.succeeded
        assert "already taken" in result.errors[0]

        count = await db_session.execute(select(func.count()).select_from(User))
        assert count.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_weak_password_is_refused(self, db_session):
        result = await UserStore(db_session).create("reader@bookstore.com", "password")
        assert not result.succeeded
        assert len(result.errors) == 3

    @pytest.mark.asyncio
    async def test_ensure_roles_is_idempotent(self, db_session):
        store = UserStore(db_session)
        await store.ensure_roles()
        roles = await store.ensure_roles([ADMINISTRATOR, CUSTOMER])
        assert [role.name for role in roles] == [ADMINISTRATOR, CUSTOMER]

        count = await db_session.execute(select(func.count()).select_from(Role))
        assert count.scalar_one() == 2

    @pytest.mark.asyncio
    async def test_create_with_explicit_roles(self, db_session):
        store = UserStore(db_session)
        await store.create("admin@bookstore.com", "P@ssword1", roles=(ADMINISTRATOR, CUSTOMER))
        user = await store.find_by_email("admin@bookstore.com")
        assert user.role_names == [ADMINISTRATOR, CUSTOMER]

    @pytest.mark.asyncio
    async def test_unknown_email_still_checks_a_hash(self, db_session, monkeypatch):
        checked = []
        monkeypatch.setattr(users, "check_password",
                            lambda password, encoded: checked.append(encoded) or False)

        assert await UserStore(db_session).verify("ghost@bookstore.com", "Ghost#123") is None
        assert len(checked) == 1
        assert checked[0].startswith("pbkdf2_sha256$")

    @pytest.mark.asyncio
    async def test_lookup_ignores_case_but_keeps_address(self, db_session):
        store = UserStore(db_session)
        await store.create("  Reader@Bookstore.com ", "Reader#42")

        user = await store.find_by_email("READER@BOOKSTORE.COM")
        assert user.email == "Reader@Bookstore.com"
