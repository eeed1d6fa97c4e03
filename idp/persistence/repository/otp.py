"""PostgreSQL implementations of the OTP repositories."""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from idp.domain.model import OtpRateLimit, OtpRequest
from idp.domain.repository import OtpRateLimitRepository, OtpRequestRepository
from idp.domain.value import OtpRequestId
from idp.persistence.mappers import (
    otp_request_to_dict,
    row_to_otp_rate_limit,
    row_to_otp_request,
)
from idp.persistence.tables import (
    otp_rate_limits_table,
    otp_requests_id_seq,
    otp_requests_table,
)


class PostgresOtpRequestRepository(OtpRequestRepository):
    """PostgreSQL implementation of OtpRequestRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def next_id(self) -> OtpRequestId:
        return OtpRequestId(
            await self.session.scalar(select(otp_requests_id_seq.next_value()))
        )

    async def add(self, request: OtpRequest) -> OtpRequest:
        await self.session.execute(
            otp_requests_table.insert().values(**otp_request_to_dict(request))
        )
        await self.session.flush()
        return request

    async def find_latest(self, identifier: str) -> Optional[OtpRequest]:
        """Newest request for the identifier."""
        stmt = (
            select(otp_requests_table)
            .where(otp_requests_table.c.identifier == identifier)
            .order_by(
                otp_requests_table.c.created_at.desc(), otp_requests_table.c.id.desc()
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_otp_request(dict(row)) if row else None

    async def increment_attempts(self, request_id: OtpRequestId) -> int:
        """Increment in the database and return the new count."""
        stmt = (
            update(otp_requests_table)
            .where(otp_requests_table.c.id == request_id)
            .values(attempt_count=otp_requests_table.c.attempt_count + 1)
            .returning(otp_requests_table.c.attempt_count)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return int(result.scalar_one())

    async def mark_used(self, request_id: OtpRequestId) -> bool:
        """UPDATE ... SET is_used = true WHERE id = :id AND is_used = false."""
        stmt = (
            update(otp_requests_table)
            .where(
                otp_requests_table.c.id == request_id,
                otp_requests_table.c.is_used.is_(False),
            )
            .values(is_used=True)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1


class PostgresOtpRateLimitRepository(OtpRateLimitRepository):
    """PostgreSQL implementation of OtpRateLimitRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_identifier(self, identifier: str) -> Optional[OtpRateLimit]:
        stmt = select(otp_rate_limits_table).where(
            otp_rate_limits_table.c.identifier == identifier
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_otp_rate_limit(dict(row)) if row else None

    async def consume(
        self,
        identifier: str,
        now: datetime,
        max_requests: int,
        window: timedelta,
    ) -> bool:
        """Create the row if missing, lock it, then apply one send."""
        await self.session.execute(
            insert(otp_rate_limits_table)
            .values(identifier=identifier, request_count=0, window_start=now)
            .on_conflict_do_nothing(index_elements=["identifier"])
        )

        stmt = (
            select(otp_rate_limits_table)
            .where(otp_rate_limits_table.c.identifier == identifier)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        current = row_to_otp_rate_limit(dict(result.mappings().one()))

        state, allowed = current.consume(now, max_requests, window)
        if state != current:
            await self.session.execute(
                update(otp_rate_limits_table)
                .where(otp_rate_limits_table.c.identifier == identifier)
                .values(
                    request_count=state.request_count,
                    window_start=state.window_start,
                    blocked_until=state.blocked_until,
                )
            )
        await self.session.flush()
        return allowed
