"""List scopes use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.value import ApiScope

SCOPE_DESCRIPTIONS: dict[ApiScope, str] = {
    ApiScope.AUTH_VALIDATE: "Validate user tokens",
    ApiScope.AUTH_SYNC: "Sync authentication state",
    ApiScope.USERS_READ: "Read user profiles",
    ApiScope.USERS_WRITE: "Update user profiles",
    ApiScope.ASSETS_READ: "Read assets",
    ApiScope.ASSETS_WRITE: "Upload and manage assets",
    ApiScope.SITES_READ: "Read site information",
    ApiScope.PUSH_SEND: "Send push notifications",
    ApiScope.ADMIN: "Full administrative access",
}


class ScopeInfo(BaseModel):
    name: str
    description: str


class ListScopesRequest(BaseModel):
    pass


class ListScopesResponse(BaseModel):
    scopes: list[ScopeInfo]


class ListScopesUseCase(BaseUseCase[ListScopesRequest, ListScopesResponse]):
    """Describe every grantable scope."""

    async def execute(self, request: ListScopesRequest) -> ListScopesResponse:
        return ListScopesResponse(
            scopes=[
                ScopeInfo(name=scope.value, description=SCOPE_DESCRIPTIONS[scope])
                for scope in ApiScope
            ]
        )
