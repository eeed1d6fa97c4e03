"""PostgreSQL implementation of ApiKey repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from idp.domain.model import ApiKey
from idp.domain.repository import ApiKeyRepository
from idp.domain.value import ApiKeyId
from idp.persistence.mappers import api_key_to_dict, row_to_api_key
from idp.persistence.repository.base import execute_unique
from idp.persistence.tables import api_keys_id_seq, api_keys_table


class PostgresApiKeyRepository(ApiKeyRepository):
    """PostgreSQL implementation of ApiKeyRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def next_id(self) -> ApiKeyId:
        return ApiKeyId(await self.session.scalar(select(api_keys_id_seq.next_value())))

    async def _find_one(self, stmt) -> Optional[ApiKey]:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_api_key(dict(row)) if row else None

    async def find_by_id(self, key_id: ApiKeyId) -> Optional[ApiKey]:
        return await self._find_one(
            select(api_keys_table).where(api_keys_table.c.id == key_id)
        )

    async def find_by_key(self, key: str) -> Optional[ApiKey]:
        return await self._find_one(
            select(api_keys_table).where(api_keys_table.c.key == key)
        )

    async def find_by_partner_key(self, partner_key: str) -> Optional[ApiKey]:
        return await self._find_one(
            select(api_keys_table).where(api_keys_table.c.partner_key == partner_key)
        )

    async def find_all(self) -> list[ApiKey]:
        stmt = select(api_keys_table).order_by(
            api_keys_table.c.partner_name, api_keys_table.c.id
        )
        result = await self.session.execute(stmt)
        return [row_to_api_key(dict(row)) for row in result.mappings().all()]

    async def add(self, api_key: ApiKey) -> ApiKey:
        """Insert a key.

        Raises:
            DuplicateCredentialError: If the partner key or secret exists
        """
        await execute_unique(
            self.session,
            api_keys_table.insert().values(**api_key_to_dict(api_key)),
            f"An API key for partner '{api_key.partner_key}' already exists.",
        )
        await self.session.flush()
        return api_key

    async def save(self, api_key: ApiKey) -> ApiKey:
        await self.session.execute(
            update(api_keys_table)
            .where(api_keys_table.c.id == api_key.id)
            .values(**api_key_to_dict(api_key))
        )
        await self.session.flush()
        return api_key

    async def delete(self, key_id: ApiKeyId) -> None:
        await self.session.execute(
            delete(api_keys_table).where(api_keys_table.c.id == key_id)
        )
        await self.session.flush()

    async def record_usage(self, key: str, used_at: datetime) -> None:
        """Increment usage inside a SAVEPOINT so a failure cannot abort the request."""
        async with self.session.begin_nested():
            await self.session.execute(
                update(api_keys_table)
                .where(api_keys_table.c.key == key)
                .values(
                    usage_count=api_keys_table.c.usage_count + 1, last_used_at=used_at
                )
            )
