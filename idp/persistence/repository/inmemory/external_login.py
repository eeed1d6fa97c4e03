"""In-memory external login repository for testing."""

from datetime import datetime
from itertools import count
from typing import Optional

from idp.domain.error import DuplicateCredentialError
from idp.domain.model.external_login import ExternalLogin
from idp.domain.repository.external_login import ExternalLoginRepository
from idp.domain.value import ExternalLoginId, UserId


class InMemoryExternalLoginRepository(ExternalLoginRepository):
    """In-memory implementation of ExternalLoginRepository for testing."""

    def __init__(self) -> None:
        self._logins: list[ExternalLogin] = []
        self._ids = count(1)

    async def next_id(self) -> ExternalLoginId:
        return ExternalLoginId(next(self._ids))

    async def find_by_provider(
        self, provider: str, provider_user_id: str
    ) -> Optional[ExternalLogin]:
        """Find login by provider identity."""
        for login in self._logins:
            if login.provider == provider and login.provider_user_id == provider_user_id:
                return login
        return None

    async def find_by_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> Optional[ExternalLogin]:
        """Find a user's login for one provider."""
        for login in self._logins:
            if login.user_id == user_id and login.provider == provider:
                return login
        return None

    async def find_all_by_user_id(self, user_id: UserId) -> list[ExternalLogin]:
        """Find all logins for a user."""
        matches = [login for login in self._logins if login.user_id == user_id]
        matches.sort(key=lambda login: (login.created_at, login.id))
        return matches

    async def count_by_user_id(self, user_id: UserId) -> int:
        return sum(1 for login in self._logins if login.user_id == user_id)

    async def add(self, login: ExternalLogin) -> ExternalLogin:
        """Insert login, enforcing both uniqueness rules."""
        if await self.find_by_provider(login.provider, login.provider_user_id):
            raise DuplicateCredentialError(
                f"This {login.provider} account is already linked to another account."
            )
        if await self.find_by_user_and_provider(login.user_id, login.provider):
            raise DuplicateCredentialError(
                f"You already have a {login.provider} account linked."
            )
        self._logins.append(login)
        return login

    async def touch(
        self,
        login_id: ExternalLoginId,
        used_at: datetime,
        provider_email: Optional[str],
        provider_display_name: Optional[str],
    ) -> Optional[ExternalLogin]:
        """Refresh metadata on a login."""
        for i, login in enumerate(self._logins):
            if login.id == login_id:
                self._logins[i] = login.model_copy(
                    update={
                        "last_used_at": used_at,
                        "provider_email": provider_email,
                        "provider_display_name": provider_display_name,
                    }
                )
                return self._logins[i]
        return None

    async def delete(self, login_id: ExternalLoginId) -> None:
        """Delete login."""
        self._logins = [login for login in self._logins if login.id != login_id]
