"""
Shared fixtures for LicenseChain client tests.
"""

import json
from unittest.mock import Mock

import pytest

LICENSE_PAYLOAD = {
    "id": "lic_1",
    "user_id": "user_1",
    "product_id": "prod_1",
    "license_key": "ABCDEFGHIJKLMNOPQRSTUVWXYZ012345",
    "status": "active",
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
    "expires_at": None,
    "metadata": {"seats": 5, "tags": ["pro", "annual"], "owner": {"team": "core"}},
}


def _make_response(status_code=200, body=None, content=None):
    response = Mock()
    response.status_code = status_code
    if content is None:
        content = b"" if body is None else json.dumps(body).encode("utf-8")
    response.content = content
    return response


@pytest.fixture
def make_response():
    """Factory for mock requests.Response objects."""
    return _make_response


@pytest.fixture
def license_payload():
    return dict(LICENSE_PAYLOAD)


@pytest.fixture
def sleep():
    """Backoff sleep replacement that records delays."""
    return Mock()
