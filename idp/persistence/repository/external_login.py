"""PostgreSQL implementation of ExternalLogin repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from idp.domain.model import ExternalLogin
from idp.domain.repository import ExternalLoginRepository
from idp.domain.value import ExternalLoginId, UserId
from idp.persistence.mappers import external_login_to_dict, row_to_external_login
from idp.persistence.repository.base import execute_unique
from idp.persistence.tables import external_logins_id_seq, external_logins_table


class PostgresExternalLoginRepository(ExternalLoginRepository):
    """PostgreSQL implementation of ExternalLoginRepository.

    Uniqueness is enforced by the table's two unique constraints.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def next_id(self) -> ExternalLoginId:
        return ExternalLoginId(
            await self.session.scalar(select(external_logins_id_seq.next_value()))
        )

    async def find_by_provider(
        self, provider: str, provider_user_id: str
    ) -> Optional[ExternalLogin]:
        """Find a login by provider identity."""
        stmt = select(external_logins_table).where(
            external_logins_table.c.provider == provider,
            external_logins_table.c.provider_user_id == provider_user_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_login(dict(row)) if row else None

    async def find_by_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> Optional[ExternalLogin]:
        """Find a user's login for one provider."""
        stmt = select(external_logins_table).where(
            external_logins_table.c.user_id == user_id,
            external_logins_table.c.provider == provider,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_login(dict(row)) if row else None

    async def find_all_by_user_id(self, user_id: UserId) -> list[ExternalLogin]:
        """Get all logins for a user, oldest first."""
        stmt = (
            select(external_logins_table)
            .where(external_logins_table.c.user_id == user_id)
            .order_by(external_logins_table.c.created_at, external_logins_table.c.id)
        )
        result = await self.session.execute(stmt)
        return [row_to_external_login(dict(row)) for row in result.mappings().all()]

    async def count_by_user_id(self, user_id: UserId) -> int:
        stmt = (
            select(func.count())
            .select_from(external_logins_table)
            .where(external_logins_table.c.user_id == user_id)
        )
        return int(await self.session.scalar(stmt) or 0)

    async def add(self, login: ExternalLogin) -> ExternalLogin:
        """Insert a login.

        Raises:
            DuplicateCredentialError: If a unique constraint rejects the row
        """
        stmt = external_logins_table.insert().values(**external_login_to_dict(login))
        await execute_unique(
            self.session,
            stmt,
            f"This {login.provider} account is already linked to an account.",
        )
        await self.session.flush()
        return login

    async def touch(
        self,
        login_id: ExternalLoginId,
        used_at: datetime,
        provider_email: Optional[str],
        provider_display_name: Optional[str],
    ) -> Optional[ExternalLogin]:
        """Refresh metadata and last-used time."""
        stmt = (
            update(external_logins_table)
            .where(external_logins_table.c.id == login_id)
            .values(
                last_used_at=used_at,
                provider_email=provider_email,
                provider_display_name=provider_display_name,
            )
            .returning(*external_logins_table.c)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()
        return row_to_external_login(dict(row)) if row else None

    async def delete(self, login_id: ExternalLoginId) -> None:
        """Delete a login."""
        await self.session.execute(
            delete(external_logins_table).where(external_logins_table.c.id == login_id)
        )
        await self.session.flush()
