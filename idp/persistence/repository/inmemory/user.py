"""In-memory user repository for testing."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from itertools import count
from typing import Optional

from idp.domain.error import DuplicateCredentialError
from idp.domain.model.user import User
from idp.domain.repository.user import UserRepository
from idp.domain.value import UserId


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}
        self._ids = count(1)
        self._locks: dict[UserId, asyncio.Lock] = {}

    async def next_id(self) -> UserId:
        return UserId(next(self._ids))

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find user by ID."""
        return self._users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email."""
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def find_by_phone(self, phone_number: str) -> Optional[User]:
        """Find user by phone number."""
        for user in self._users.values():
            if user.phone_number == phone_number:
                return user
        return None

    async def save(self, user: User) -> User:
        """Save user, enforcing unique email and phone."""
        for other in self._users.values():
            if other.id == user.id:
                continue
            if user.email and other.email == user.email:
                raise DuplicateCredentialError("Email is already registered.")
            if user.phone_number and other.phone_number == user.phone_number:
                raise DuplicateCredentialError(
                    "This phone number is already linked to another account."
                )
        self._users[user.id] = user
        return user

    async def delete(self, user_id: UserId) -> None:
        self._users.pop(user_id, None)

    @asynccontextmanager
    async def locked(self, user_id: UserId) -> AsyncIterator[Optional[User]]:
        """Serialize callers per user with an asyncio lock."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            yield self._users.get(user_id)
