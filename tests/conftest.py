"""Pytest fixtures for pipedrive-deals tests."""

import pytest
import respx
from httpx import Response

API_URL = "https://api.pipedrive.com/v1"


@pytest.fixture
def fake_api_token() -> str:
    """Fake API token for testing."""
    return "test-token-123"


@pytest.fixture
def mock_api():
    """Mock httpx client for Pipedrive API."""
    with respx.mock(base_url=API_URL) as respx_mock:
        yield respx_mock


@pytest.fixture
def sample_deal() -> dict:
    """Sample deal data from Pipedrive API."""
    return {
        "id": 42,
        "title": "Test Deal",
        "value": 10000,
        "currency": "EUR",
        "person_id": 1,
        "org_id": 1,
        "stage_id": 1,
        "status": "open",
        "visible_to": "3",
        "add_time": "2024-01-01 10:00:00",
        "update_time": "2024-01-02 10:00:00",
    }


@pytest.fixture
def sample_deal_field() -> dict:
    """Sample deal field definition from Pipedrive API."""
    return {
        "id": 12,
        "key": "9dc80c5cb1d9",
        "name": "Tier",
        "field_type": "enum",
        "edit_flag": True,
        "options": [
            {"id": 1, "label": "Gold"},
            {"id": 2, "label": "Silver"},
        ],
    }


def make_api_response(data: list | dict | None, success: bool = True) -> Response:
    """Create a mock Pipedrive API response."""
    body = {"success": success, "data": data}
    return Response(200, json=body)
