"""Unit tests for in-memory repositories.

These back every unit test, so they must enforce the same uniqueness
rules as the database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from idp.domain.error import DuplicateCredentialError
from idp.domain.model import ExternalLogin, OtpRequest, User
from idp.domain.value import UserId
from idp.persistence.repository.inmemory import (
    InMemoryExternalLoginRepository,
    InMemoryOtpRateLimitRepository,
    InMemoryOtpRequestRepository,
    InMemoryUserRepository,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestInMemoryUserRepository:
    """Tests for InMemoryUserRepository."""

    @pytest.mark.asyncio
    async def test_email_and_phone_are_unique(self):
        repo = InMemoryUserRepository()
        await repo.save(User(id=await repo.next_id(), email="ada@example.com"))
        await repo.save(User(id=await repo.next_id(), phone_number="+15551234567"))

        with pytest.raises(DuplicateCredentialError):
            await repo.save(User(id=await repo.next_id(), email="ada@example.com"))
        with pytest.raises(DuplicateCredentialError):
            await repo.save(User(id=await repo.next_id(), phone_number="+15551234567"))

    @pytest.mark.asyncio
    async def test_save_updates_in_place(self):
        repo = InMemoryUserRepository()
        user = await repo.save(User(id=await repo.next_id(), email="ada@example.com"))

        await repo.save(user.model_copy(update={"phone_number": "+15551234567"}))

        found = await repo.find_by_email("ada@example.com")
        assert found.phone_number == "+15551234567"
        assert await repo.find_by_phone("+15551234567") == found

    @pytest.mark.asyncio
    async def test_delete(self):
        repo = InMemoryUserRepository()
        user = await repo.save(User(id=await repo.next_id()))

        await repo.delete(user.id)

        assert await repo.find_by_id(user.id) is None


class TestInMemoryExternalLoginRepository:
    """Tests for InMemoryExternalLoginRepository."""

    def make_login(self, login_id: int, user_id: int, provider: str, subject: str):
        return ExternalLogin(
            id=login_id,
            user_id=UserId(user_id),
            provider=provider,
            provider_user_id=subject,
            created_at=NOW + timedelta(seconds=login_id),
        )

    @pytest.mark.asyncio
    async def test_identity_is_globally_unique(self):
        repo = InMemoryExternalLoginRepository()
        await repo.add(self.make_login(1, 1, "google", "g-1"))

        with pytest.raises(DuplicateCredentialError):
            await repo.add(self.make_login(2, 2, "google", "g-1"))

    @pytest.mark.asyncio
    async def test_one_login_per_provider_per_user(self):
        repo = InMemoryExternalLoginRepository()
        await repo.add(self.make_login(1, 1, "google", "g-1"))

        with pytest.raises(DuplicateCredentialError):
            await repo.add(self.make_login(2, 1, "google", "g-2"))

    @pytest.mark.asyncio
    async def test_listing_is_oldest_first(self):
        repo = InMemoryExternalLoginRepository()
        await repo.add(self.make_login(2, 1, "apple", "a-1"))
        await repo.add(self.make_login(1, 1, "google", "g-1"))

        logins = await repo.find_all_by_user_id(UserId(1))

        assert [login.provider for login in logins] == ["google", "apple"]
        assert await repo.count_by_user_id(UserId(1)) == 2


class TestInMemoryOtpRepositories:
    """Tests for OTP request and rate limit repositories."""

    @pytest.mark.asyncio
    async def test_find_latest_breaks_ties_by_id(self):
        repo = InMemoryOtpRequestRepository()
        for code in ("111111", "222222"):
            await repo.add(
                OtpRequest(
                    id=await repo.next_id(),
                    identifier="ada@example.com",
                    code=code,
                    created_at=NOW,
                    expires_at=NOW + timedelta(minutes=10),
                )
            )

        latest = await repo.find_latest("ada@example.com")

        assert latest.code == "222222"

    @pytest.mark.asyncio
    async def test_mark_used_only_once(self):
        repo = InMemoryOtpRequestRepository()
        request = await repo.add(
            OtpRequest(
                id=await repo.next_id(),
                identifier="ada@example.com",
                code="123456",
                created_at=NOW,
                expires_at=NOW + timedelta(minutes=10),
            )
        )

        assert await repo.mark_used(request.id) is True
        assert await repo.mark_used(request.id) is False

    @pytest.mark.asyncio
    async def test_consume_persists_state(self):
        repo = InMemoryOtpRateLimitRepository()

        assert await repo.consume("ada@example.com", NOW, 1, timedelta(minutes=10))
        assert not await repo.consume("ada@example.com", NOW, 1, timedelta(minutes=10))

        state = await repo.find_by_identifier("ada@example.com")
        assert state.request_count == 1
        assert state.blocked_until == NOW + timedelta(minutes=10)
