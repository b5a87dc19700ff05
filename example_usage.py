#!/usr/bin/env python3
"""
Basic usage examples for the LicenseChain Python client library.

This script demonstrates license management calls and webhook verification
against a LicenseChain deployment. Set LICENSECHAIN_API_KEY (and optionally
LICENSECHAIN_BASE_URL) before running it.
"""

import logging
import sys

from licensechain import (
    LicenseChainClient,
    LicenseChainError,
    WebhookEvents,
    WebhookHandler,
)
from licensechain.utils import (
    create_webhook_signature,
    generate_license_key,
    get_current_date,
    serialize_payload,
    validate_license_key,
)


def main():
    """Run basic usage examples."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=== LicenseChain Python Client Basic Usage Examples ===\n")

    # Create client
    print("1. Creating LicenseChain client...")
    try:
        client = LicenseChainClient.from_environment()
    except LicenseChainError as e:
        print(f"   ✗ {e.description}")
        print(f"   {e.recovery_suggestion}")
        return 1
    print(f"   Client created for: {client.config.base_url}\n")

    with client:
        # Example 1: Health check
        print("2. Checking service health...")
        try:
            health = client.health()
            print(f"   ✓ Health check successful: {health.get('status', 'unknown')}")
        except LicenseChainError as e:
            print(f"   ✗ Health check failed: {e.description}")
        print()

        # Example 2: License key helpers
        print("3. Generating a local license key...")
        key = generate_license_key()
        print(f"   Key: {key}")
        print(f"   Well-formed: {'✓' if validate_license_key(key) else '✗'}")
        print()

        # Example 3: Validate a license key
        print("4. Validating license key with the service...")
        try:
            is_valid = client.validate_license(key)
            print(f"   Validation: {'✓ Valid' if is_valid else '✗ Invalid'}")
        except LicenseChainError as e:
            print(f"   ✗ Validation error: {e.description}")
            print(f"   Reason: {e.failure_reason}")
        print()

        # Example 4: License statistics
        print("5. Fetching license statistics...")
        try:
            stats = client.get_license_stats()
            print(f"   Total: {stats.total}  Active: {stats.active}  Revoked: {stats.revoked}")
        except LicenseChainError as e:
            print(f"   ✗ Stats error: {e.description}")
        print()

    # Example 5: Webhook verification
    print("6. Verifying a signed webhook delivery...")
    secret = "example-webhook-secret"
    handler = WebhookHandler(secret)

    @handler.on(WebhookEvents.LICENSE_REVOKED)
    def on_revoked(event):
        print(f"   ✓ Revoked handler called for {event['data']['id']}")

    data = {"id": "lic_example", "reason": "refund"}
    delivery = {
        "type": WebhookEvents.LICENSE_REVOKED,
        "data": data,
        "signature": create_webhook_signature(serialize_payload(data), secret),
        "timestamp": get_current_date(),
    }
    try:
        handler.process_event(delivery)
    except LicenseChainError as e:
        print(f"   ✗ Webhook rejected: {e.description}")
    print()

    print("=== Examples completed ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
