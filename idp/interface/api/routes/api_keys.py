"""API key administration routes.

Guarded by a partner API key holding the ``admin`` scope.
"""

import logging
from typing import Annotated

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, status

from idp.application.gate import GateDecision
from idp.application.usecase.api_key import (
    CreateApiKeyUseCase,
    DeleteApiKeyUseCase,
    GetApiKeyUseCase,
    ListApiKeysUseCase,
    ListScopesUseCase,
    RegenerateApiKeyUseCase,
    ToggleApiKeyUseCase,
    UpdateApiKeyUseCase,
)
from idp.application.usecase.api_key.create_api_key import CreateApiKeyRequest
from idp.application.usecase.api_key.info import ApiKeyInfo, ApiKeyWithSecret
from idp.application.usecase.api_key.list_api_keys import (
    GetApiKeyRequest,
    ListApiKeysRequest,
    ListApiKeysResponse,
)
from idp.application.usecase.api_key.list_scopes import (
    ListScopesRequest,
    ListScopesResponse,
)
from idp.application.usecase.api_key.manage_api_key import (
    ApiKeyIdRequest,
    DeleteApiKeyResponse,
)
from idp.application.usecase.api_key.update_api_key import (
    UpdateApiKeyFields,
    UpdateApiKeyRequest,
)
from idp.domain.value import ApiScope
from idp.interface.api.dependencies import require_api_key

logger = logging.getLogger(__name__)

require_admin = require_api_key(ApiScope.ADMIN.value)

router = APIRouter(
    prefix="/admin/api-keys",
    tags=["api-keys"],
    route_class=DishkaRoute,
    dependencies=[Depends(require_admin)],
)

AdminKey = Annotated[GateDecision, Depends(require_admin)]


@router.get("", response_model=ListApiKeysResponse)
async def list_api_keys(
    use_case: FromDishka[ListApiKeysUseCase],
) -> ListApiKeysResponse:
    """List all partner keys with secrets masked."""
    return await use_case.execute(ListApiKeysRequest())


@router.get("/scopes", response_model=ListScopesResponse)
async def list_scopes(use_case: FromDishka[ListScopesUseCase]) -> ListScopesResponse:
    """Describe every grantable scope."""
    return await use_case.execute(ListScopesRequest())


@router.get("/{key_id}", response_model=ApiKeyInfo)
async def get_api_key(
    key_id: int, use_case: FromDishka[GetApiKeyUseCase]
) -> ApiKeyInfo:
    return await use_case.execute(GetApiKeyRequest(key_id=key_id))


@router.post("", response_model=ApiKeyWithSecret, status_code=status.HTTP_201_CREATED)
async def create_api_key(
    request: CreateApiKeyRequest,
    admin: AdminKey,
    use_case: FromDishka[CreateApiKeyUseCase],
) -> ApiKeyWithSecret:
    """Create a partner key. The full secret is only returned here."""
    if admin.api_key is not None:
        request = request.model_copy(update={"created_by": admin.api_key.partner_key})
    logger.info(f"Creating API key for partner {request.partner_key}")
    return await use_case.execute(request)


@router.put("/{key_id}", response_model=ApiKeyInfo)
async def update_api_key(
    key_id: int,
    body: UpdateApiKeyFields,
    admin: AdminKey,
    use_case: FromDishka[UpdateApiKeyUseCase],
) -> ApiKeyInfo:
    """Update key settings; omitted fields are left unchanged."""
    request = UpdateApiKeyRequest(key_id=key_id, **body.model_dump())
    if admin.api_key is not None:
        request.updated_by = admin.api_key.partner_key
    return await use_case.execute(request)


@router.post("/{key_id}/toggle", response_model=ApiKeyInfo)
async def toggle_api_key(
    key_id: int, use_case: FromDishka[ToggleApiKeyUseCase]
) -> ApiKeyInfo:
    """Activate or deactivate a key."""
    return await use_case.execute(ApiKeyIdRequest(key_id=key_id))


@router.post("/{key_id}/regenerate", response_model=ApiKeyWithSecret)
async def regenerate_api_key(
    key_id: int, use_case: FromDishka[RegenerateApiKeyUseCase]
) -> ApiKeyWithSecret:
    """Replace the secret. The old secret stops working immediately."""
    logger.info(f"Regenerating API key {key_id}")
    return await use_case.execute(ApiKeyIdRequest(key_id=key_id))


@router.delete("/{key_id}", response_model=DeleteApiKeyResponse)
async def delete_api_key(
    key_id: int, use_case: FromDishka[DeleteApiKeyUseCase]
) -> DeleteApiKeyResponse:
    logger.info(f"Deleting API key {key_id}")
    return await use_case.execute(ApiKeyIdRequest(key_id=key_id))
