"""List external logins use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.service import IdentityService
from idp.domain.value import UserId

from .result import ExternalLoginInfo


class ListExternalLoginsRequest(BaseModel):
    user_id: int


class ListExternalLoginsResponse(BaseModel):
    logins: list[ExternalLoginInfo]


class ListExternalLoginsUseCase(
    BaseUseCase[ListExternalLoginsRequest, ListExternalLoginsResponse]
):
    """List the provider identities linked to a user."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(
        self, request: ListExternalLoginsRequest
    ) -> ListExternalLoginsResponse:
        logins = await self.identity_service.list_external_logins(
            UserId(request.user_id)
        )
        return ListExternalLoginsResponse(
            logins=[ExternalLoginInfo.from_login(login) for login in logins]
        )
