"""
Constants for the LicenseChain client library.
Header names and defaults match the LicenseChain REST API contract.
"""

SDK_NAME = "LicenseChain-Python-SDK"
SDK_VERSION = "1.0.0"

# HTTP Headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_API_VERSION = "X-API-Version"
HEADER_PLATFORM = "X-Platform"
HEADER_USER_AGENT = "User-Agent"

API_VERSION = "1.0"
PLATFORM = "python-sdk"
USER_AGENT = f"{SDK_NAME}/{SDK_VERSION}"
CONTENT_TYPE_JSON = "application/json"

DEFAULT_BASE_URL = "https://api.licensechain.app"

# Default configuration values
DEFAULT_CONFIG = {
    'base_url': DEFAULT_BASE_URL,
    'timeout': 30,              # HTTP timeout in seconds, per attempt
    'max_retries': 3,           # attempts per logical call
}

# Environment variables read by ClientConfig.from_env()
ENV_API_KEY = "LICENSECHAIN_API_KEY"
ENV_BASE_URL = "LICENSECHAIN_BASE_URL"

DEFAULT_WEBHOOK_TOLERANCE = 5 * 60  # 5 minutes in seconds
LICENSE_KEY_LENGTH = 32
SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CHF", "CNY")


class WebhookEvents:
    """Event types delivered by LicenseChain webhooks."""

    LICENSE_CREATED = "license.created"
    LICENSE_UPDATED = "license.updated"
    LICENSE_REVOKED = "license.revoked"
    LICENSE_EXPIRED = "license.expired"
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    PRODUCT_DELETED = "product.deleted"
    PAYMENT_COMPLETED = "payment.completed"
    PAYMENT_FAILED = "payment.failed"
    PAYMENT_REFUNDED = "payment.refunded"

    ALL = (
        LICENSE_CREATED,
        LICENSE_UPDATED,
        LICENSE_REVOKED,
        LICENSE_EXPIRED,
        USER_CREATED,
        USER_UPDATED,
        USER_DELETED,
        PRODUCT_CREATED,
        PRODUCT_UPDATED,
        PRODUCT_DELETED,
        PAYMENT_COMPLETED,
        PAYMENT_FAILED,
        PAYMENT_REFUNDED,
    )
