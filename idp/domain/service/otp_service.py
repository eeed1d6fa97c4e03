"""One-time code domain service."""

import secrets
from datetime import timedelta

import logfire
from pydantic import ValidationError as PydanticValidationError

from idp.config import OtpSettings
from idp.domain.error import (
    DeliveryFailedError,
    OtpVerificationError,
    RateLimitedError,
    ValidationError,
)
from idp.domain.model.otp import OtpRequest
from idp.domain.repository import (
    OtpRateLimitRepository,
    OtpRequestRepository,
    UserRepository,
)
from idp.domain.value import ErrorKind, Identifier, UserId
from idp.util.clock import Clock

from .base import Service


class OtpTransport:
    """Delivery channel for one-time codes (SMS or email)."""

    async def deliver(self, identifier: Identifier, code: str) -> bool:
        """Hand a code to the carrier.

        Args:
            identifier: Normalized email or phone target
            code: The code to send

        Returns:
            True if the carrier accepted the message
        """
        raise NotImplementedError


def parse_identifier(raw: str) -> Identifier:
    """Normalize a raw email or phone number.

    Raises:
        ValidationError: If the input is neither
    """
    try:
        return Identifier.parse(raw)
    except (PydanticValidationError, ValueError):
        raise ValidationError("Enter a valid email address or phone number.")


def generate_code() -> str:
    """Cryptographically random 6-digit code without a leading zero."""
    return str(100000 + secrets.randbelow(900000))


class OtpService(Service):
    """Issues, throttles and verifies one-time codes."""

    def __init__(
        self,
        otp_request_repository: OtpRequestRepository,
        otp_rate_limit_repository: OtpRateLimitRepository,
        user_repository: UserRepository,
        transport: OtpTransport,
        otp_settings: OtpSettings,
        clock: Clock,
    ) -> None:
        """Initialize OTP service.

        Args:
            otp_request_repository: Issued codes
            otp_rate_limit_repository: Per-identifier send throttles
            user_repository: Used to match the identifier to an account
            transport: SMS/email delivery
            otp_settings: TTL, throttle and attempt limits
            clock: Time source
        """
        self.otp_request_repository = otp_request_repository
        self.otp_rate_limit_repository = otp_rate_limit_repository
        self.user_repository = user_repository
        self.transport = transport
        self.settings = otp_settings
        self.clock = clock

    async def send(self, raw_identifier: str) -> Identifier:
        """Issue a new code and hand it to the transport.

        The throttle is consumed before any code exists, so a refused send
        never creates one. A delivery failure is reported after the code has
        been stored; that code stays valid.

        Args:
            raw_identifier: Email or phone as typed by the user

        Returns:
            The normalized identifier the code was sent to

        Raises:
            ValidationError: If the identifier is malformed
            RateLimitedError: If the identifier is throttled
            DeliveryFailedError: If the transport did not accept the code
        """
        identifier = parse_identifier(raw_identifier)

        with logfire.span("otp_service.send", kind=identifier.kind.value):
            now = self.clock.now()
            allowed = await self.otp_rate_limit_repository.consume(
                identifier.value,
                now,
                self.settings.max_sends_per_window,
                timedelta(minutes=self.settings.window_minutes),
            )
            if not allowed:
                logfire.warn("OTP send rate limited", kind=identifier.kind.value)
                raise RateLimitedError()

            matched_user_id = await self._match_user(identifier)
            request = OtpRequest(
                id=await self.otp_request_repository.next_id(),
                identifier=identifier.value,
                code=generate_code(),
                user_id=matched_user_id,
                created_at=now,
                expires_at=now + timedelta(minutes=self.settings.code_ttl_minutes),
            )
            await self.otp_request_repository.add(request)

            try:
                delivered = await self.transport.deliver(identifier, request.code)
            except Exception as e:
                logfire.error(
                    "OTP transport raised", error=str(e), kind=identifier.kind.value
                )
                delivered = False

            if not delivered:
                raise DeliveryFailedError(
                    "We could not deliver your code. Please try again shortly."
                )

            logfire.info(
                "OTP sent",
                request_id=request.id,
                kind=identifier.kind.value,
                existing_user=matched_user_id is not None,
            )
            return identifier

    async def verify(self, raw_identifier: str, code: str) -> Identifier:
        """Verify and consume a code.

        Only the newest request for the identifier is eligible. Every call
        that finds a request counts as an attempt, including failures.
        Consumption is a conditional update, so of two concurrent calls with
        the same valid code exactly one succeeds.

        Args:
            raw_identifier: Email or phone the code was sent to
            code: Submitted code

        Returns:
            The normalized identifier

        Raises:
            ValidationError: If the identifier is malformed
            OtpVerificationError: With kind CODE_MISMATCH, CODE_ALREADY_USED,
                CODE_EXPIRED or TOO_MANY_ATTEMPTS
        """
        identifier = parse_identifier(raw_identifier)

        with logfire.span("otp_service.verify", kind=identifier.kind.value):
            request = await self.otp_request_repository.find_latest(identifier.value)
            if request is None:
                raise OtpVerificationError("Invalid OTP.", ErrorKind.CODE_MISMATCH)

            attempts = await self.otp_request_repository.increment_attempts(request.id)

            if request.is_used:
                if request.matches(code):
                    raise OtpVerificationError(
                        "This OTP has already been used.", ErrorKind.CODE_ALREADY_USED
                    )
                raise OtpVerificationError("Invalid OTP.", ErrorKind.CODE_MISMATCH)

            if request.is_expired(self.clock.now()):
                raise OtpVerificationError("This OTP has expired.", ErrorKind.CODE_EXPIRED)

            if attempts > self.settings.max_verify_attempts:
                logfire.warn("OTP attempts exhausted", request_id=request.id)
                raise OtpVerificationError(
                    "Too many attempts. Please request a new code.",
                    ErrorKind.TOO_MANY_ATTEMPTS,
                )

            if not request.matches(code):
                raise OtpVerificationError("Invalid OTP.", ErrorKind.CODE_MISMATCH)

            if not await self.otp_request_repository.mark_used(request.id):
                raise OtpVerificationError(
                    "This OTP has already been used.", ErrorKind.CODE_ALREADY_USED
                )

            logfire.info("OTP verified", request_id=request.id)
            return identifier

    async def _match_user(self, identifier: Identifier) -> UserId | None:
        if identifier.is_email:
            user = await self.user_repository.find_by_email(identifier.value)
        else:
            user = await self.user_repository.find_by_phone(identifier.value)
        return user.id if user else None
