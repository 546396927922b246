"""
API fixtures for testing
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from json_file_store import get_file_store
from traccar_api_client import TraccarAPIClient, get_traccar_client


@pytest.fixture
def mock_traccar():
    """Traccar client double with no devices and no events"""
    client = MagicMock(spec=TraccarAPIClient)
    client.get_devices.return_value = []
    client.get_events.return_value = []
    return client


@pytest.fixture
def test_client(file_store, mock_traccar):
    """Test client wired to a temp file store and the Traccar double"""
    from main import app

    app.dependency_overrides[get_file_store] = lambda: file_store
    app.dependency_overrides[get_traccar_client] = lambda: mock_traccar
    yield TestClient(app)
    app.dependency_overrides.clear()
