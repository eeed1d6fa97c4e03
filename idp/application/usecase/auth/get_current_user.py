"""Get current user use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.service import IdentityService
from idp.domain.value import UserId

from .result import ExternalLoginInfo, UserInfo


class GetCurrentUserRequest(BaseModel):
    """Get current user request."""

    user_id: int  # From the validated bearer token


class GetCurrentUserResponse(UserInfo):
    """User with linked provider identities."""

    external_logins: list[ExternalLoginInfo]


class GetCurrentUserUseCase(BaseUseCase[GetCurrentUserRequest, GetCurrentUserResponse]):
    """Use case for getting current authenticated user."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Load the user and their external logins.

        Raises:
            NotFoundError: If the token outlived the user
        """
        user = await self.identity_service.get_user(UserId(request.user_id))
        logins = await self.identity_service.list_external_logins(user.id)

        return GetCurrentUserResponse(
            **UserInfo.from_user(user).model_dump(),
            external_logins=[ExternalLoginInfo.from_login(login) for login in logins],
        )
