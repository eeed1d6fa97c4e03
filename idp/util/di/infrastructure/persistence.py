"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from idp.config import Settings
from idp.domain.repository import (
    AfterCommit,
    ApiKeyRepository,
    ExternalLoginRepository,
    OtpRateLimitRepository,
    OtpRequestRepository,
    UserRepository,
)
from idp.persistence.database import create_engine, create_session_factory
from idp.persistence.repository import (
    PostgresApiKeyRepository,
    PostgresExternalLoginRepository,
    PostgresOtpRateLimitRepository,
    PostgresOtpRequestRepository,
    PostgresUserRepository,
)
from idp.util.di.base import ProviderBase
from idp.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the app container closes."""
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    def get_after_commit(self) -> AfterCommit:
        return AfterCommit()

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        after_commit: AfterCommit,
    ) -> AsyncIterator[AsyncSession]:
        """Provide one transaction per request.

        Committed when the request finishes, rolled back if it raised.
        Row locks taken by repositories are held until then. After-commit
        callbacks run only once the commit has succeeded.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise
        await after_commit.run()

    @provide(scope=Scope.REQUEST)
    def get_user_repository(self, session: AsyncSession) -> UserRepository:
        return PostgresUserRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_external_login_repository(
        self, session: AsyncSession
    ) -> ExternalLoginRepository:
        return PostgresExternalLoginRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_otp_request_repository(self, session: AsyncSession) -> OtpRequestRepository:
        return PostgresOtpRequestRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_otp_rate_limit_repository(
        self, session: AsyncSession
    ) -> OtpRateLimitRepository:
        return PostgresOtpRateLimitRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_api_key_repository(self, session: AsyncSession) -> ApiKeyRepository:
        return PostgresApiKeyRepository(session)
