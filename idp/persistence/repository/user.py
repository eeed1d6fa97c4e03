"""PostgreSQL implementation of User repository."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from idp.domain.model import User
from idp.domain.repository import UserRepository
from idp.domain.value import UserId
from idp.persistence.mappers import row_to_user, user_to_dict
from idp.persistence.repository.base import execute_unique
from idp.persistence.tables import users_id_seq, users_table


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def next_id(self) -> UserId:
        """Draw the next value from the users sequence."""
        return UserId(await self.session.scalar(select(users_id_seq.next_value())))

    async def _find_one(self, stmt) -> Optional[User]:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        return await self._find_one(select(users_table).where(users_table.c.id == user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by their email.

        Args:
            email: Lowercased email

        Returns:
            User if found, None otherwise
        """
        return await self._find_one(
            select(users_table).where(users_table.c.email == email)
        )

    async def find_by_phone(self, phone_number: str) -> Optional[User]:
        """Find a user by their phone number.

        Args:
            phone_number: E.164 phone number

        Returns:
            User if found, None otherwise
        """
        return await self._find_one(
            select(users_table).where(users_table.c.phone_number == phone_number)
        )

    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: User to save

        Returns:
            Saved user

        Raises:
            DuplicateCredentialError: If the email or phone is taken
        """
        existing = await self.find_by_id(user.id)
        user_dict = user_to_dict(user)

        if existing:
            stmt = (
                users_table.update()
                .where(users_table.c.id == user.id)
                .values(**user_dict)
            )
        else:
            stmt = users_table.insert().values(**user_dict)

        await execute_unique(
            self.session, stmt, "This email or phone number is already in use."
        )
        await self.session.flush()
        return user

    async def delete(self, user_id: UserId) -> None:
        """Delete a user; external logins go with it (ON DELETE CASCADE)."""
        await self.session.execute(
            users_table.delete().where(users_table.c.id == user_id)
        )
        await self.session.flush()

    @asynccontextmanager
    async def locked(self, user_id: UserId) -> AsyncIterator[Optional[User]]:
        """Row-lock the user with SELECT ... FOR UPDATE.

        The lock is held until the request transaction ends.
        """
        yield await self._find_one(
            select(users_table).where(users_table.c.id == user_id).with_for_update()
        )
