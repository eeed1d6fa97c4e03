"""JWT token domain service."""

import logfire

from idp.config import PLACEHOLDER_SECRET, AuthSettings
from idp.domain.error import MisconfiguredError
from idp.domain.model.user import User
from idp.domain.value import TokenValidation, UserId
from idp.util.clock import Clock
from idp.util.error import JWTError
from idp.util.jwt import create_token, verify_token

from .base import Service


class JWTService(Service):
    """Domain service for bearer token operations.

    Tokens are HMAC-signed with one process-wide secret shared by every
    trusted consumer. There is no revocation list; a token stays valid
    until it expires.
    """

    def __init__(self, auth_settings: AuthSettings, clock: Clock) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
            clock: Time source for issue and expiry checks
        """
        self.auth_settings = auth_settings
        self.clock = clock

    def _ensure_configured(self) -> None:
        secret = self.auth_settings.jwt_secret
        if not secret or secret == PLACEHOLDER_SECRET:
            logfire.error("JWT signing secret is not configured")
            raise MisconfiguredError("Token signing is not configured.")

    def issue(self, user: User) -> str:
        """Issue a token carrying the user's identity claims.

        Args:
            user: Authenticated user

        Returns:
            JWT token string

        Raises:
            MisconfiguredError: If the signing secret is unset or a placeholder
        """
        with logfire.span("jwt_service.issue", user_id=user.id):
            self._ensure_configured()
            token = create_token(
                str(user.id),
                user.email,
                user.phone_number,
                self.auth_settings,
                self.clock.now(),
            )
            logfire.info("JWT token issued", user_id=user.id)
            return token

    def validate(self, token: str) -> TokenValidation:
        """Validate a token without revealing why it failed.

        Args:
            token: JWT token string

        Returns:
            Validation outcome with claims when valid

        Raises:
            MisconfiguredError: If the signing secret is unset or a placeholder
        """
        with logfire.span("jwt_service.validate"):
            self._ensure_configured()
            try:
                payload = verify_token(token, self.auth_settings, self.clock.now())
                user_id = UserId(int(payload.user_id))
            except (JWTError, ValueError) as e:
                logfire.debug("JWT validation failed", error=str(e))
                return TokenValidation(valid=False)

            return TokenValidation(
                valid=True,
                user_id=user_id,
                email=payload.email,
                phone_number=payload.phone_number,
            )

    def get_user_id_from_token(self, token: str | None) -> UserId | None:
        """Extract user ID from a token, or None if missing or invalid.

        Convenience for routes that optionally authenticate the caller.
        """
        if not token:
            return None
        result = self.validate(token)
        return result.user_id if result.valid else None
