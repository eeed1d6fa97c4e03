"""User repository interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Optional

from idp.domain.model.user import User
from idp.domain.value import UserId


class UserRepository(ABC):
    """Repository for User aggregate root."""

    @abstractmethod
    async def next_id(self) -> UserId:
        """Reserve an identifier for a new user."""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by normalized email.

        Args:
            email: Lowercased email address

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_phone(self, phone_number: str) -> Optional[User]:
        """Find a user by E.164 phone number.

        Args:
            phone_number: Normalized phone number

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: The user to save

        Returns:
            The saved user

        Raises:
            DuplicateCredentialError: If the email or phone belongs to another user
        """
        pass

    @abstractmethod
    async def delete(self, user_id: UserId) -> None:
        """Delete a user and, by cascade, their external logins.

        Args:
            user_id: The user to delete
        """
        pass

    @abstractmethod
    def locked(self, user_id: UserId) -> AbstractAsyncContextManager[Optional[User]]:
        """Hold an exclusive per-user guard for a read-check-write sequence.

        Concurrent callers for the same user id are serialized until the
        context exits.

        Args:
            user_id: The user to lock

        Returns:
            Async context manager yielding the current user, or None if missing
        """
        pass
