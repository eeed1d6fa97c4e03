"""External login repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from idp.domain.model.external_login import ExternalLogin
from idp.domain.value import ExternalLoginId, UserId


class ExternalLoginRepository(ABC):
    """Repository for ExternalLogin entity.

    Enforces both uniqueness rules: one owner per provider identity, and one
    identity per provider per user.
    """

    @abstractmethod
    async def next_id(self) -> ExternalLoginId:
        """Reserve an identifier for a new external login."""
        pass

    @abstractmethod
    async def find_by_provider(
        self, provider: str, provider_user_id: str
    ) -> Optional[ExternalLogin]:
        """Find a login by provider identity.

        Args:
            provider: Lowercased provider name
            provider_user_id: The user's ID on that provider

        Returns:
            The login if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> Optional[ExternalLogin]:
        """Find the login a user holds for one provider.

        Args:
            user_id: Owning user
            provider: Lowercased provider name

        Returns:
            The login if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_id(self, user_id: UserId) -> list[ExternalLogin]:
        """Get all logins linked to a user, oldest first.

        Args:
            user_id: The user's unique identifier

        Returns:
            List of logins (may be empty)
        """
        pass

    @abstractmethod
    async def count_by_user_id(self, user_id: UserId) -> int:
        """Count logins linked to a user."""
        pass

    @abstractmethod
    async def add(self, login: ExternalLogin) -> ExternalLogin:
        """Insert a new login.

        Args:
            login: The login to insert

        Returns:
            The inserted login

        Raises:
            DuplicateCredentialError: If either uniqueness rule is violated
        """
        pass

    @abstractmethod
    async def touch(
        self,
        login_id: ExternalLoginId,
        used_at: datetime,
        provider_email: Optional[str],
        provider_display_name: Optional[str],
    ) -> Optional[ExternalLogin]:
        """Refresh provider metadata and last-used time.

        Returns:
            The updated login, or None if it no longer exists
        """
        pass

    @abstractmethod
    async def delete(self, login_id: ExternalLoginId) -> None:
        """Delete a login.

        Args:
            login_id: The login to delete
        """
        pass
