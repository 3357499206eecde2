"""
Pytest fixtures for demo service tests.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def app():
    from demo_service.app import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app, gateway):
    """TestClient whose routes use the in-memory gateway."""
    from demo_service.dependencies import get_gateway

    app.dependency_overrides[get_gateway] = lambda: gateway
    return TestClient(app)


@pytest.fixture
def failing_client(app):
    """TestClient whose gateway raises on every call."""
    from unittest.mock import MagicMock

    from contact_store import ConnectivityError
    from demo_service.dependencies import get_gateway

    gateway = MagicMock()
    error = ConnectivityError("MongoDB unreachable during list_page: no servers")
    gateway.list_page.side_effect = error
    gateway.upsert.side_effect = error
    gateway.delete_all.side_effect = error
    gateway.session.side_effect = error

    app.dependency_overrides[get_gateway] = lambda: gateway
    return TestClient(app)
