"""Helpers for reaching into the mock container from HTTP tests."""

from typing import TypeVar

from dishka import AsyncContainer
from fastapi.testclient import TestClient

from idp.adapter.notification import MockOtpTransport
from idp.domain.model import ApiKey
from idp.domain.service import ApiKeyService

T = TypeVar("T")


def resolve(client: TestClient, container: AsyncContainer, dependency: type[T]) -> T:
    """Resolve an APP-scoped object on the client's event loop."""
    return client.portal.call(container.get, dependency)


def last_code(client: TestClient, container: AsyncContainer, value: str) -> str:
    return resolve(client, container, MockOtpTransport).last_code(value)


def create_api_key(client: TestClient, container: AsyncContainer, **kwargs) -> ApiKey:
    """Create a key directly through the service."""
    fields = {"partner_key": "acme", "partner_name": "Acme", "scopes": []}
    fields.update(kwargs)

    async def _create() -> ApiKey:
        async with container() as request_container:
            service = await request_container.get(ApiKeyService)
            return await service.create_key(**fields)

    return client.portal.call(_create)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
