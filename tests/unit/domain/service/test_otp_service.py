"""Unit tests for OtpService."""

import asyncio

import pytest

from idp.adapter.notification import MockOtpTransport
from idp.config import OtpSettings
from idp.domain.error import (
    DeliveryFailedError,
    OtpVerificationError,
    RateLimitedError,
    ValidationError,
)
from idp.domain.repository import OtpRequestRepository
from idp.domain.service import IdentityService, OtpService
from idp.domain.value import ErrorKind, IdentifierKind
from tests.di import FakeClock
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


class TestSend:
    """Tests for send method."""

    @pytest.mark.asyncio
    async def test_send_delivers_six_digit_code(self, unit_env):
        """Sending should store a code and hand it to the transport."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)

        # Act
        identifier = await otp_service.send("  Ada@Example.COM ")

        # Assert
        assert identifier.kind == IdentifierKind.EMAIL
        assert identifier.value == "ada@example.com"
        code = transport.last_code("ada@example.com")
        assert code is not None
        assert len(code) == 6
        assert code.isdigit()
        assert code[0] != "0"

    @pytest.mark.asyncio
    async def test_send_normalizes_phone(self, unit_env):
        """Phone formatting characters should be dropped."""
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)

        identifier = await otp_service.send("+1 (555) 123-4567")

        assert identifier.kind == IdentifierKind.PHONE
        assert identifier.value == "+15551234567"
        assert transport.last_code("+15551234567") is not None

    @pytest.mark.asyncio
    async def test_send_records_matched_user(self, unit_env):
        """A code sent to a registered email should reference the account."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        identity_service = await unit_env.get(IdentityService)
        otp_repo = await unit_env.get(OtpRequestRepository)
        user = await identity_service.register("ada@example.com", "correct-horse")

        # Act
        await otp_service.send("ada@example.com")

        # Assert
        request = await otp_repo.find_latest("ada@example.com")
        assert request is not None
        assert request.user_id == user.id

    @pytest.mark.asyncio
    async def test_send_rejects_malformed_identifier(self, unit_env):
        otp_service = await unit_env.get(OtpService)

        with pytest.raises(ValidationError):
            await otp_service.send("not-an-identifier")

    @pytest.mark.asyncio
    async def test_send_throttles_after_window_limit(self, unit_env):
        """The send past the window limit should be refused without a new code."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        settings = await unit_env.get(OtpSettings)

        for _ in range(settings.max_sends_per_window):
            await otp_service.send("ada@example.com")
        delivered = len(transport.deliveries)

        # Act & Assert
        with pytest.raises(RateLimitedError):
            await otp_service.send("ada@example.com")
        assert len(transport.deliveries) == delivered

    @pytest.mark.asyncio
    async def test_throttle_is_per_identifier(self, unit_env):
        """Exhausting one identifier should not affect another."""
        otp_service = await unit_env.get(OtpService)
        settings = await unit_env.get(OtpSettings)

        for _ in range(settings.max_sends_per_window):
            await otp_service.send("ada@example.com")

        identifier = await otp_service.send("grace@example.com")

        assert identifier.value == "grace@example.com"

    @pytest.mark.asyncio
    async def test_throttle_lifts_after_window(self, unit_env):
        """Sends should be allowed again once the window has passed."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        settings = await unit_env.get(OtpSettings)
        clock = await unit_env.get(FakeClock)

        for _ in range(settings.max_sends_per_window):
            await otp_service.send("ada@example.com")
        with pytest.raises(RateLimitedError):
            await otp_service.send("ada@example.com")

        # Act
        clock.advance(minutes=settings.window_minutes)
        identifier = await otp_service.send("ada@example.com")

        # Assert
        assert identifier.value == "ada@example.com"

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_code_valid(self, unit_env):
        """A stored code should still verify when the carrier refused it."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        otp_repo = await unit_env.get(OtpRequestRepository)
        transport = await unit_env.get(MockOtpTransport)
        transport.fail = True

        # Act
        with pytest.raises(DeliveryFailedError):
            await otp_service.send("ada@example.com")

        # Assert
        request = await otp_repo.find_latest("ada@example.com")
        assert request is not None
        identifier = await otp_service.verify("ada@example.com", request.code)
        assert identifier.value == "ada@example.com"


class TestVerify:
    """Tests for verify method."""

    @pytest.mark.asyncio
    async def test_verify_correct_code(self, unit_env):
        """The latest code should verify once."""
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        await otp_service.send("ada@example.com")

        identifier = await otp_service.verify(
            "ADA@example.com", transport.last_code("ada@example.com")
        )

        assert identifier.value == "ada@example.com"

    @pytest.mark.asyncio
    async def test_verify_without_request_is_mismatch(self, unit_env):
        otp_service = await unit_env.get(OtpService)

        with pytest.raises(OtpVerificationError) as exc:
            await otp_service.verify("ada@example.com", "123456")

        assert exc.value.kind == ErrorKind.CODE_MISMATCH

    @pytest.mark.asyncio
    async def test_verify_wrong_code_is_mismatch(self, unit_env):
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        await otp_service.send("ada@example.com")
        code = transport.last_code("ada@example.com")
        wrong = "100000" if code != "100000" else "100001"

        with pytest.raises(OtpVerificationError) as exc:
            await otp_service.verify("ada@example.com", wrong)

        assert exc.value.kind == ErrorKind.CODE_MISMATCH

    @pytest.mark.asyncio
    async def test_code_is_single_use(self, unit_env):
        """A second verification with the same code should fail as used."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        await otp_service.send("ada@example.com")
        code = transport.last_code("ada@example.com")
        await otp_service.verify("ada@example.com", code)

        # Act & Assert
        with pytest.raises(OtpVerificationError) as exc:
            await otp_service.verify("ada@example.com", code)
        assert exc.value.kind == ErrorKind.CODE_ALREADY_USED

    @pytest.mark.asyncio
    async def test_expired_code_is_rejected(self, unit_env):
        """A correct code past its TTL should fail as expired."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        settings = await unit_env.get(OtpSettings)
        clock = await unit_env.get(FakeClock)
        await otp_service.send("ada@example.com")
        code = transport.last_code("ada@example.com")

        # Act
        clock.advance(minutes=settings.code_ttl_minutes)

        # Assert
        with pytest.raises(OtpVerificationError) as exc:
            await otp_service.verify("ada@example.com", code)
        assert exc.value.kind == ErrorKind.CODE_EXPIRED

    @pytest.mark.asyncio
    async def test_only_latest_code_is_eligible(self, unit_env):
        """Sending a new code should retire the previous one."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        clock = await unit_env.get(FakeClock)
        await otp_service.send("ada@example.com")
        first = transport.last_code("ada@example.com")
        clock.advance(seconds=1)
        await otp_service.send("ada@example.com")
        second = transport.last_code("ada@example.com")

        # Act & Assert
        if first != second:
            with pytest.raises(OtpVerificationError):
                await otp_service.verify("ada@example.com", first)
        identifier = await otp_service.verify("ada@example.com", second)
        assert identifier.value == "ada@example.com"

    @pytest.mark.asyncio
    async def test_attempts_are_capped(self, unit_env):
        """After too many attempts even the correct code should be refused."""
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        settings = await unit_env.get(OtpSettings)
        await otp_service.send("ada@example.com")
        code = transport.last_code("ada@example.com")
        wrong = "100000" if code != "100000" else "100001"

        for _ in range(settings.max_verify_attempts):
            with pytest.raises(OtpVerificationError):
                await otp_service.verify("ada@example.com", wrong)

        # Act & Assert
        with pytest.raises(OtpVerificationError) as exc:
            await otp_service.verify("ada@example.com", code)
        assert exc.value.kind == ErrorKind.TOO_MANY_ATTEMPTS

    @pytest.mark.asyncio
    async def test_failed_attempts_are_counted(self, unit_env):
        otp_service = await unit_env.get(OtpService)
        otp_repo = await unit_env.get(OtpRequestRepository)
        await otp_service.send("ada@example.com")
        request = await otp_repo.find_latest("ada@example.com")
        wrong = "100000" if request.code != "100000" else "100001"

        with pytest.raises(OtpVerificationError):
            await otp_service.verify("ada@example.com", wrong)

        request = await otp_repo.find_latest("ada@example.com")
        assert request.attempt_count == 1
        assert request.is_used is False


class TestConcurrency:
    """Concurrent calls for one identifier must not slip past the checks."""

    @pytest.mark.asyncio
    async def test_concurrent_verifies_succeed_once(self, unit_env):
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        await otp_service.send("ada@example.com")
        code = transport.last_code("ada@example.com")

        # Act
        results = await asyncio.gather(
            otp_service.verify("ada@example.com", code),
            otp_service.verify("ada@example.com", code),
            return_exceptions=True,
        )

        # Assert
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], OtpVerificationError)
        assert failures[0].kind == ErrorKind.CODE_ALREADY_USED

    @pytest.mark.asyncio
    async def test_send_burst_cannot_pass_the_limit(self, unit_env):
        # Arrange
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        settings = await unit_env.get(OtpSettings)
        burst = settings.max_sends_per_window * 2

        # Act
        results = await asyncio.gather(
            *(otp_service.send("ada@example.com") for _ in range(burst)),
            return_exceptions=True,
        )

        # Assert
        allowed = [r for r in results if not isinstance(r, Exception)]
        refused = [r for r in results if isinstance(r, RateLimitedError)]
        assert len(allowed) == settings.max_sends_per_window
        assert len(refused) == burst - settings.max_sends_per_window
        assert len(transport.deliveries) == settings.max_sends_per_window
