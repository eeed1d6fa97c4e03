"""API key administration use cases."""

from .create_api_key import CreateApiKeyUseCase
from .list_api_keys import GetApiKeyUseCase, ListApiKeysUseCase
from .list_scopes import ListScopesUseCase
from .manage_api_key import (
    DeleteApiKeyUseCase,
    RegenerateApiKeyUseCase,
    ToggleApiKeyUseCase,
)
from .update_api_key import UpdateApiKeyUseCase

__all__ = [
    "CreateApiKeyUseCase",
    "DeleteApiKeyUseCase",
    "GetApiKeyUseCase",
    "ListApiKeysUseCase",
    "ListScopesUseCase",
    "RegenerateApiKeyUseCase",
    "ToggleApiKeyUseCase",
    "UpdateApiKeyUseCase",
]
