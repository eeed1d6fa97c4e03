"""Access gate for partner endpoints.

Decides whether a request presenting an API key (or, where allowed, a user
bearer token) may reach an endpoint requiring a scope.
"""

from typing import Optional

import logfire
from pydantic import BaseModel

from idp.domain.model import ApiKey
from idp.domain.service import ApiKeyService, JWTService
from idp.domain.value import ErrorKind, UserId


class GateDecision(BaseModel):
    """Outcome of an access check."""

    allowed: bool
    message: str = ""
    kind: Optional[ErrorKind] = None
    api_key: Optional[ApiKey] = None
    user_id: Optional[UserId] = None  # Set when a bearer token was accepted instead

    @classmethod
    def deny(cls, kind: ErrorKind, message: str) -> "GateDecision":
        return cls(allowed=False, kind=kind, message=message)


class ApiKeyGate:
    """Checks key validity, IP allow-list and scope, in that order."""

    def __init__(self, api_key_service: ApiKeyService, jwt_service: JWTService) -> None:
        self.api_key_service = api_key_service
        self.jwt_service = jwt_service

    async def check(
        self,
        api_key: Optional[str],
        client_ip: Optional[str] = None,
        required_scope: Optional[str] = None,
        allow_jwt: bool = False,
        bearer_token: Optional[str] = None,
    ) -> GateDecision:
        """Decide access for one request.

        Args:
            api_key: Secret from the API key header
            client_ip: Caller address for the allow-list
            required_scope: Scope the endpoint needs, if any
            allow_jwt: Accept a valid user bearer token when no key is sent
            bearer_token: Token from the Authorization header

        Returns:
            The decision; on success it carries the key (or the user ID)

        Raises:
            MisconfiguredError: If the JWT fallback is used without a signing secret
        """
        with logfire.span("api_key_gate.check", required_scope=required_scope):
            if not api_key:
                if allow_jwt and bearer_token:
                    user_id = self.jwt_service.get_user_id_from_token(bearer_token)
                    if user_id is not None:
                        return GateDecision(allowed=True, user_id=user_id)
                return GateDecision.deny(ErrorKind.UNAUTHORIZED, "API key is required.")

            key = await self.api_key_service.validate(api_key)
            if key is None:
                return GateDecision.deny(
                    ErrorKind.UNAUTHORIZED, "Invalid or expired API key."
                )

            if not key.allows_ip(client_ip):
                logfire.warn(
                    "API key used from disallowed IP",
                    partner_key=key.partner_key,
                    client_ip=client_ip,
                )
                return GateDecision.deny(
                    ErrorKind.FORBIDDEN, "Access denied from this IP address."
                )

            if required_scope and not key.has_scope(required_scope):
                logfire.info(
                    "API key missing scope",
                    partner_key=key.partner_key,
                    required_scope=required_scope,
                )
                return GateDecision.deny(
                    ErrorKind.FORBIDDEN,
                    f"API key does not have the required scope: {required_scope}",
                )

            await self.api_key_service.record_usage(key.key)
            return GateDecision(allowed=True, api_key=key)
