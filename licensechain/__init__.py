"""
LicenseChain Python SDK

A client library for the LicenseChain licensing service: typed access to
the license, user, product and webhook endpoints with retry and backoff,
plus verification of signed webhook deliveries.

Example usage:
    from licensechain import LicenseChainClient

    with LicenseChainClient("your-api-key") as client:
        license = client.get_license("lic_123")
"""

import logging

from .client import LicenseChainClient, RequestSpec
from .config import ClientConfig
from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CONFIG,
    DEFAULT_WEBHOOK_TOLERANCE,
    SDK_VERSION,
    WebhookEvents,
)
from .exceptions import (
    LicenseChainError,
    ConfigurationError,
    InvalidApiKeyError,
    InvalidUrlError,
    InvalidResponseError,
    NetworkError,
    HTTPError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnknownError
)
from .models import (
    License,
    LicenseListResponse,
    LicenseStats,
    User,
    UserListResponse,
    UserStats,
    Product,
    ProductListResponse,
    ProductStats,
    Webhook
)
from .webhooks import WebhookHandler

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = SDK_VERSION
__author__ = "LicenseChain"
__all__ = [
    "LicenseChainClient",
    "RequestSpec",
    "ClientConfig",
    "WebhookHandler",
    "WebhookEvents",
    "LicenseChainError",
    "ConfigurationError",
    "InvalidApiKeyError",
    "InvalidUrlError",
    "InvalidResponseError",
    "NetworkError",
    "HTTPError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "UnknownError",
    "License",
    "LicenseListResponse",
    "LicenseStats",
    "User",
    "UserListResponse",
    "UserStats",
    "Product",
    "ProductListResponse",
    "ProductStats",
    "Webhook",
    "DEFAULT_BASE_URL",
    "DEFAULT_CONFIG",
    "DEFAULT_WEBHOOK_TOLERANCE"
]
