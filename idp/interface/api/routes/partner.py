"""Partner routes.

Endpoints called by partner sites with their API key.
"""

from typing import Annotated

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from idp.application.gate import GateDecision
from idp.application.usecase.auth import ValidateTokenUseCase
from idp.application.usecase.auth.result import TokenValidationResult
from idp.application.usecase.auth.validate_token import ValidateTokenRequest
from idp.domain.value import ApiScope
from idp.interface.api.dependencies import client_ip, require_api_key

router = APIRouter(prefix="/partner", tags=["partner"], route_class=DishkaRoute)


class PartnerInfoResponse(BaseModel):
    """Who the gate admitted."""

    authenticated_as: str  # "api_key" or "user"
    partner_key: str | None = None
    partner_name: str | None = None
    scopes: list[str] = []
    user_id: int | None = None
    client_ip: str | None = None


class ScopeCheckResponse(BaseModel):
    scope: str
    granted: bool


@router.get("/whoami", response_model=PartnerInfoResponse)
async def whoami(
    request: Request,
    decision: Annotated[GateDecision, Depends(require_api_key(allow_jwt=True))],
) -> PartnerInfoResponse:
    """Describe the calling partner key, or the user when a bearer token was used."""
    if decision.api_key is None:
        return PartnerInfoResponse(
            authenticated_as="user",
            user_id=decision.user_id,
            client_ip=client_ip(request),
        )
    return PartnerInfoResponse(
        authenticated_as="api_key",
        partner_key=decision.api_key.partner_key,
        partner_name=decision.api_key.partner_name,
        scopes=decision.api_key.scopes,
        client_ip=client_ip(request),
    )


@router.get("/scopes/{scope}", response_model=ScopeCheckResponse)
async def check_scope(
    scope: str,
    decision: Annotated[GateDecision, Depends(require_api_key())],
) -> ScopeCheckResponse:
    """Report whether the calling key grants a scope."""
    return ScopeCheckResponse(scope=scope, granted=decision.api_key.has_scope(scope))


@router.post(
    "/validate-token",
    response_model=TokenValidationResult,
    dependencies=[Depends(require_api_key(ApiScope.AUTH_VALIDATE.value))],
)
async def validate_token(
    request: ValidateTokenRequest,
    use_case: FromDishka[ValidateTokenUseCase],
) -> TokenValidationResult:
    """Validate a user token on behalf of a partner site."""
    return await use_case.execute(request)
