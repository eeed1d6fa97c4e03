"""Request authentication dependencies.

Services are resolved from the request-scoped dishka container that
``setup_dishka`` attaches to ``request.state``.
"""

import logging
from typing import Awaitable, Callable, Optional

from fastapi import HTTPException, Request, status

from idp.application.gate import ApiKeyGate, GateDecision
from idp.config import ApiKeySettings
from idp.domain.service import JWTService
from idp.domain.value import UserId
from idp.interface.error import http_exception_for

logger = logging.getLogger(__name__)


def bearer_token(request: Request) -> Optional[str]:
    """Token from ``Authorization: Bearer <token>``, if present."""
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def require_user(request: Request) -> UserId:
    """Resolve the signed-in user from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    token = bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    jwt_service = await request.state.dishka_container.get(JWTService)
    result = jwt_service.validate(token)
    if not result.valid or result.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result.user_id


def require_api_key(
    scope: Optional[str] = None, allow_jwt: bool = False
) -> Callable[[Request], Awaitable[GateDecision]]:
    """Build a dependency guarding an endpoint with a partner API key.

    Args:
        scope: Scope the key must grant
        allow_jwt: Also admit a valid user bearer token when no key is sent

    Returns:
        FastAPI dependency returning the gate decision
    """

    async def _check(request: Request) -> GateDecision:
        container = request.state.dishka_container
        settings = await container.get(ApiKeySettings)
        gate = await container.get(ApiKeyGate)

        decision = await gate.check(
            request.headers.get(settings.header_name),
            client_ip=client_ip(request),
            required_scope=scope,
            allow_jwt=allow_jwt,
            bearer_token=bearer_token(request),
        )
        if not decision.allowed:
            logger.info(f"{request.url.path}: access denied ({decision.kind})")
            raise http_exception_for(decision.kind, decision.message)

        if decision.api_key is not None:
            request.state.api_key = decision.api_key
            request.state.api_key_partner = decision.api_key.partner_key
        return decision

    return _check
