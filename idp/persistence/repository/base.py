"""Shared helpers for PostgreSQL repositories."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from idp.domain.error import DuplicateCredentialError


async def execute_unique(session: AsyncSession, stmt: Executable, message: str) -> None:
    """Execute a write that may hit a unique constraint.

    The statement runs inside a SAVEPOINT so a violation leaves the request
    transaction usable.

    Raises:
        DuplicateCredentialError: If a unique constraint rejects the write
    """
    try:
        async with session.begin_nested():
            await session.execute(stmt)
    except IntegrityError as e:
        raise DuplicateCredentialError(message) from e
