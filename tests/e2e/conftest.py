"""Fixtures for HTTP tests against the app built on the mock container."""

import pytest
from dishka import AsyncContainer
from fastapi.testclient import TestClient

from idp.domain.model import ApiKey
from idp.interface.api.app import create_app
from tests.di import build_test_container
from tests.e2e.helpers import create_api_key


@pytest.fixture
def container() -> AsyncContainer:
    return build_test_container()


@pytest.fixture
def client(container):
    """Test client running the app and the container on one event loop."""
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def admin_key(client, container) -> ApiKey:
    return create_api_key(
        client, container, partner_key="ops", partner_name="Operations", scopes=["admin"]
    )
