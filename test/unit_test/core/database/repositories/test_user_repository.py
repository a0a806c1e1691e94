"""Unit tests for the user repository."""

from __future__ import annotations

import pytest
from sqlalchemy import update

from flyergen.core.database.entities import DEFAULT_CREDITS, User
from flyergen.core.database.repositories import UserRepository


class TestUserRepository:
    @pytest.fixture
    def repository(self, in_memory_session):
        return UserRepository(in_memory_session)

    async def test_create_applies_defaults(self, repository):
        user = await repository.create(User(username="ana", email="ana@example.com"))

        assert user.id
        assert user.credits == DEFAULT_CREDITS
        assert user.watermark_enabled is True
        assert user.stripe_subscription_id is None
        assert await repository.get_by_id(user.id) is user

    async def test_lookups(self, repository, create_user):
        user = await create_user(username="bob", email="bob@example.com", stripe_subscription_id="sub_1")

        assert (await repository.get_by_email("bob@example.com")).id == user.id
        assert (await repository.get_by_username("bob")).id == user.id
        assert (await repository.get_by_subscription_id("sub_1")).id == user.id
        assert await repository.get_by_email("nobody@example.com") is None
        assert await repository.get_by_subscription_id("sub_missing") is None

    @pytest.mark.parametrize("identifier", ["carol", "carol@example.com"])
    async def test_get_by_login_accepts_username_or_email(self, repository, create_user, identifier):
        user = await create_user(username="carol", email="carol@example.com")
        assert (await repository.get_by_login(identifier)).id == user.id

    async def test_deduct_credit(self, repository, create_user):
        user = await create_user(credits=2)

        assert await repository.deduct_credit(user) is user
        assert user.credits == 1
        assert await repository.deduct_credit(user, amount=5) is None
        assert user.credits == 1

        reloaded = await repository.get_by_id(user.id)
        assert reloaded.credits == 1

    async def test_deduct_credit_keeps_concurrent_writes(self, repository, create_user, second_session):
        user = await create_user(credits=3)
        # A renewal committed by another request after ``user`` was loaded
        await second_session.execute(update(User).where(User.id == user.id).values(credits=500))
        await second_session.commit()

        await repository.deduct_credit(user)

        assert user.credits == 499

    async def test_parallel_debits_both_count(self, repository, create_user, second_session):
        user = await create_user(credits=2)
        other_copy = await UserRepository(second_session).get_by_id(user.id)

        await repository.deduct_credit(user)
        await UserRepository(second_session).deduct_credit(other_copy)

        await repository.session.refresh(user)
        assert user.credits == 0
        assert other_copy.credits == 0
        assert await repository.deduct_credit(user) is None

    async def test_delete(self, repository, create_user):
        user = await create_user()
        assert await repository.delete(user.id) is True
        assert await repository.delete(user.id) is False
        assert await repository.get_by_id(user.id) is None
