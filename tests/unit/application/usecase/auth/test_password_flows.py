"""Unit tests for password sign-up, login, change and reset use cases."""

import pytest

from idp.adapter.notification import MockOtpTransport
from idp.application.usecase.auth import (
    ChangePasswordUseCase,
    LoginUseCase,
    RegisterUseCase,
    ResetPasswordUseCase,
    SendPasswordResetUseCase,
)
from idp.application.usecase.auth.change_password import ChangePasswordRequest
from idp.application.usecase.auth.login import LoginRequest
from idp.application.usecase.auth.password_reset import (
    RESET_SENT_MESSAGE,
    ResetPasswordRequest,
    SendPasswordResetRequest,
)
from idp.application.usecase.auth.register import RegisterRequest
from idp.domain.error import INVALID_CREDENTIALS_MESSAGE
from idp.domain.service import JWTService
from idp.domain.value import ErrorKind
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

PASSWORD = "correct-horse"


async def register(unit_env, email: str = "ada@example.com"):
    use_case = await unit_env.get(RegisterUseCase)
    return await use_case.execute(RegisterRequest(email=email, password=PASSWORD))


class TestRegisterUseCase:
    """Tests for RegisterUseCase."""

    @pytest.mark.asyncio
    async def test_register_returns_valid_token(self, unit_env):
        # Arrange
        jwt_service = await unit_env.get(JWTService)

        # Act
        result = await register(unit_env)

        # Assert
        assert result.success is True
        assert result.is_new_user is True
        assert result.user.email == "ada@example.com"
        claims = jwt_service.validate(result.token)
        assert claims.valid is True
        assert claims.user_id == result.user.user_id
        assert claims.email == "ada@example.com"

    @pytest.mark.asyncio
    async def test_duplicate_registration_is_a_failed_result(self, unit_env):
        """Domain failures are returned, never raised."""
        await register(unit_env)

        result = await register(unit_env, email="ADA@example.com")

        assert result.success is False
        assert result.kind == ErrorKind.DUPLICATE_CREDENTIAL
        assert result.token is None


class TestLoginUseCase:
    """Tests for LoginUseCase."""

    @pytest.mark.asyncio
    async def test_login_success(self, unit_env):
        await register(unit_env)
        use_case = await unit_env.get(LoginUseCase)

        result = await use_case.execute(
            LoginRequest(email="ada@example.com", password=PASSWORD)
        )

        assert result.success is True
        assert result.message == "Login successful."
        assert result.token is not None
        assert result.is_new_user is False

    @pytest.mark.asyncio
    async def test_login_failure_message_is_generic(self, unit_env):
        await register(unit_env)
        use_case = await unit_env.get(LoginUseCase)

        wrong = await use_case.execute(
            LoginRequest(email="ada@example.com", password="wrong-password")
        )
        unknown = await use_case.execute(
            LoginRequest(email="nobody@example.com", password=PASSWORD)
        )

        assert wrong.success is False
        assert wrong.kind == ErrorKind.INVALID_CREDENTIALS
        assert wrong.message == unknown.message == INVALID_CREDENTIALS_MESSAGE


class TestChangePasswordUseCase:
    """Tests for ChangePasswordUseCase."""

    @pytest.mark.asyncio
    async def test_change_password(self, unit_env):
        registered = await register(unit_env)
        use_case = await unit_env.get(ChangePasswordUseCase)

        result = await use_case.execute(
            ChangePasswordRequest(
                user_id=registered.user.user_id,
                current_password=PASSWORD,
                new_password="new-password-1",
            )
        )

        assert result.success is True

    @pytest.mark.asyncio
    async def test_change_password_rejects_short_password(self, unit_env):
        registered = await register(unit_env)
        use_case = await unit_env.get(ChangePasswordUseCase)

        result = await use_case.execute(
            ChangePasswordRequest(
                user_id=registered.user.user_id,
                current_password=PASSWORD,
                new_password="short",
            )
        )

        assert result.success is False
        assert result.kind == ErrorKind.INVALID_INPUT


class TestPasswordResetUseCases:
    """Tests for the two-step password reset."""

    @pytest.mark.asyncio
    async def test_send_reset_does_not_reveal_account(self, unit_env):
        """Known and unknown identifiers get the same answer."""
        await register(unit_env)
        use_case = await unit_env.get(SendPasswordResetUseCase)

        known = await use_case.execute(
            SendPasswordResetRequest(identifier="ada@example.com")
        )
        unknown = await use_case.execute(
            SendPasswordResetRequest(identifier="nobody@example.com")
        )

        assert known.success is True
        assert known.message == unknown.message == RESET_SENT_MESSAGE

    @pytest.mark.asyncio
    async def test_reset_then_login_with_new_password(self, unit_env):
        # Arrange
        await register(unit_env)
        transport = await unit_env.get(MockOtpTransport)
        send = await unit_env.get(SendPasswordResetUseCase)
        reset = await unit_env.get(ResetPasswordUseCase)
        login = await unit_env.get(LoginUseCase)
        await send.execute(SendPasswordResetRequest(identifier="ada@example.com"))

        # Act
        result = await reset.execute(
            ResetPasswordRequest(
                identifier="ada@example.com",
                code=transport.last_code("ada@example.com"),
                new_password="new-password-1",
            )
        )

        # Assert
        assert result.success is True
        logged_in = await login.execute(
            LoginRequest(email="ada@example.com", password="new-password-1")
        )
        assert logged_in.success is True

    @pytest.mark.asyncio
    async def test_reset_with_wrong_code(self, unit_env):
        await register(unit_env)
        send = await unit_env.get(SendPasswordResetUseCase)
        reset = await unit_env.get(ResetPasswordUseCase)
        transport = await unit_env.get(MockOtpTransport)
        await send.execute(SendPasswordResetRequest(identifier="ada@example.com"))
        code = transport.last_code("ada@example.com")

        result = await reset.execute(
            ResetPasswordRequest(
                identifier="ada@example.com",
                code="100000" if code != "100000" else "100001",
                new_password="new-password-1",
            )
        )

        assert result.success is False
        assert result.kind == ErrorKind.CODE_MISMATCH
