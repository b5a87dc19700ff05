"""
Unit tests for webhook verification and dispatch.
"""

import datetime
import hashlib
import hmac
import logging
from unittest.mock import Mock

import pytest

from licensechain import (
    AuthenticationError,
    ConfigurationError,
    ValidationError,
    WebhookEvents,
    WebhookHandler,
)
from licensechain.utils import serialize_payload

SECRET = "whsec_test"
NOW = datetime.datetime(2024, 6, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


def sign(payload, secret=SECRET):
    return hmac.new(secret.encode('utf-8'), payload.encode('utf-8'), hashlib.sha256).hexdigest()


def iso(moment):
    return moment.isoformat()


def flip(signature, index):
    replacement = '0' if signature[index] != '0' else '1'
    return signature[:index] + replacement + signature[index + 1:]


class TestWebhookHandler:
    """Test webhook signature and timestamp verification."""

    @pytest.fixture
    def handler(self):
        """Create handler with a fixed clock."""
        return WebhookHandler(SECRET, clock=lambda: NOW)

    def test_init_defaults(self, handler):
        assert handler.tolerance == 300
        assert handler.secret == SECRET

    def test_init_invalid(self):
        with pytest.raises(ConfigurationError):
            WebhookHandler("")

        with pytest.raises(ConfigurationError):
            WebhookHandler(SECRET, tolerance=-1)

    @pytest.mark.parametrize("payload", [
        "",
        '{"id":"lic_1"}',
        "plain text payload",
        "ünïcödé ✓",
    ])
    def test_verify_signature_valid(self, handler, payload):
        assert handler.verify_signature(payload, sign(payload)) is True

    def test_verify_signature_flipped_characters(self, handler):
        """Test that changing any character of the signature fails."""
        payload = '{"id":"lic_1","status":"revoked"}'
        signature = sign(payload)

        for index in range(len(signature)):
            assert handler.verify_signature(payload, flip(signature, index)) is False

    def test_verify_signature_wrong_secret(self, handler):
        payload = '{"id":"lic_1"}'

        assert handler.verify_signature(payload, sign(payload, "other-secret")) is False

    def test_verify_signature_wrong_payload(self, handler):
        assert handler.verify_signature('{"id":"lic_2"}', sign('{"id":"lic_1"}')) is False

    @pytest.mark.parametrize("signature", ["", "invalid", "ü" * 64, None])
    def test_verify_signature_malformed(self, handler, signature):
        assert handler.verify_signature("payload", signature) is False

    def test_verify_timestamp_now(self, handler):
        handler.verify_timestamp(iso(NOW))

    @pytest.mark.parametrize("offset", [-300, -299.5, 0, 299.5, 300])
    def test_verify_timestamp_within_tolerance(self, handler, offset):
        """Test that the tolerance window is inclusive at both ends."""
        handler.verify_timestamp(iso(NOW + datetime.timedelta(seconds=offset)))

    @pytest.mark.parametrize("offset", [-400, -300.001, 300.001, 400])
    def test_verify_timestamp_outside_tolerance(self, handler, offset):
        with pytest.raises(ValidationError):
            handler.verify_timestamp(iso(NOW + datetime.timedelta(seconds=offset)))

    def test_verify_timestamp_zulu_suffix(self, handler):
        handler.verify_timestamp("2024-06-01T12:01:00Z")

    def test_verify_timestamp_naive_is_utc(self, handler):
        handler.verify_timestamp("2024-06-01T11:58:00")

    def test_verify_timestamp_other_offset(self, handler):
        handler.verify_timestamp("2024-06-01T14:00:00+02:00")

    @pytest.mark.parametrize("timestamp", ["invalid", "", "2024-13-45T00:00:00Z", None])
    def test_verify_timestamp_invalid_format(self, handler, timestamp):
        with pytest.raises(ValidationError) as exc_info:
            handler.verify_timestamp(timestamp)

        assert exc_info.value.message == "Invalid timestamp format"

    def test_custom_tolerance(self):
        handler = WebhookHandler(SECRET, tolerance=10, clock=lambda: NOW)

        handler.verify_timestamp(iso(NOW - datetime.timedelta(seconds=10)))
        with pytest.raises(ValidationError):
            handler.verify_timestamp(iso(NOW - datetime.timedelta(seconds=11)))

    def test_verify_webhook_valid(self, handler):
        payload = '{"id":"lic_1"}'

        handler.verify_webhook(payload, sign(payload), iso(NOW))

    def test_verify_webhook_stale_timestamp_checked_first(self, handler):
        """Test that a stale delivery fails validation even with a good signature."""
        payload = '{"id":"lic_1"}'
        stale = iso(NOW - datetime.timedelta(seconds=301))

        with pytest.raises(ValidationError) as exc_info:
            handler.verify_webhook(payload, sign(payload), stale)

        assert not isinstance(exc_info.value, AuthenticationError)
        assert exc_info.value.kind == "validation"

    def test_verify_webhook_stale_and_bad_signature(self, handler):
        stale = iso(NOW - datetime.timedelta(seconds=301))

        with pytest.raises(ValidationError):
            handler.verify_webhook("payload", "bad", stale)

    def test_verify_webhook_bad_signature(self, handler):
        with pytest.raises(AuthenticationError) as exc_info:
            handler.verify_webhook("payload", "bad", iso(NOW))

        assert exc_info.value.kind == "authentication"

    def test_default_clock(self):
        handler = WebhookHandler(SECRET)
        now = datetime.datetime.now(datetime.timezone.utc)

        handler.verify_timestamp(now.isoformat())


class TestProcessEvent:
    """Test event verification and dispatch."""

    @pytest.fixture
    def sink(self):
        return Mock(spec=logging.Logger)

    @pytest.fixture
    def handler(self, sink):
        return WebhookHandler(SECRET, logger=sink, clock=lambda: NOW)

    def make_event(self, event_type, data, timestamp=None, secret=SECRET):
        return {
            "type": event_type,
            "data": data,
            "signature": sign(serialize_payload(data), secret),
            "timestamp": timestamp or iso(NOW),
        }

    def test_dispatches_revoked_handler_once(self, handler):
        revoked = Mock(return_value="handled")
        handler.register(WebhookEvents.LICENSE_REVOKED, revoked)
        event = self.make_event("license.revoked", {"id": "lic_1", "reason": "chargeback"})

        result = handler.process_event(event)

        revoked.assert_called_once_with(event)
        assert result == "handled"

    def test_handlers_argument(self, sink):
        created = Mock()
        handler = WebhookHandler(
            SECRET,
            handlers={WebhookEvents.USER_CREATED: created},
            logger=sink,
            clock=lambda: NOW,
        )

        handler.process_event(self.make_event("user.created", {"id": "user_1"}))

        created.assert_called_once()

    def test_on_decorator(self, handler):
        seen = []

        @handler.on(WebhookEvents.PAYMENT_COMPLETED)
        def on_payment(event):
            seen.append(event["data"]["id"])

        handler.process_event(self.make_event("payment.completed", {"id": "pay_1"}))

        assert seen == ["pay_1"]

    def test_default_handler_logs(self, handler, sink):
        handler.process_event(self.make_event("license.revoked", {"id": "lic_1"}))

        sink.info.assert_called_once_with("%s %s: %s", "License", "revoked", "lic_1")

    def test_default_handler_unknown_id(self, handler, sink):
        handler.process_event(self.make_event("product.deleted", {}))

        sink.info.assert_called_once_with("%s %s: %s", "Product", "deleted", "unknown")

    def test_all_event_types_have_handlers(self, handler, sink):
        for event_type in WebhookEvents.ALL:
            handler.process_event(self.make_event(event_type, {"id": "x"}))

        assert sink.info.call_count == len(WebhookEvents.ALL)

    def test_unknown_event_type_is_ignored(self, handler, sink):
        result = handler.process_event(self.make_event("license.teleported", {"id": "lic_1"}))

        assert result is None
        sink.warning.assert_called_once_with("Unknown webhook event type: %s", "license.teleported")
        sink.info.assert_not_called()

    @pytest.mark.parametrize("event_type", [["license.revoked"], {"name": "license.revoked"}, 42])
    def test_non_string_event_type_is_ignored(self, handler, sink, event_type):
        revoked = Mock()
        handler.register(WebhookEvents.LICENSE_REVOKED, revoked)

        result = handler.process_event(self.make_event(event_type, {"id": "lic_1"}))

        assert result is None
        revoked.assert_not_called()
        sink.warning.assert_called_once_with("Unknown webhook event type: %s", event_type)

    def test_canonical_payload_ignores_key_order(self, handler):
        revoked = Mock()
        handler.register(WebhookEvents.LICENSE_REVOKED, revoked)
        event = self.make_event("license.revoked", {"id": "lic_1", "a": 1})
        event["data"] = {"a": 1, "id": "lic_1"}

        handler.process_event(event)

        revoked.assert_called_once()

    def test_tampered_data(self, handler):
        event = self.make_event("license.revoked", {"id": "lic_1"})
        event["data"] = {"id": "lic_2"}

        with pytest.raises(AuthenticationError):
            handler.process_event(event)

    def test_wrong_secret(self, handler):
        event = self.make_event("license.revoked", {"id": "lic_1"}, secret="other")

        with pytest.raises(AuthenticationError):
            handler.process_event(event)

    def test_stale_event(self, handler):
        revoked = Mock()
        handler.register(WebhookEvents.LICENSE_REVOKED, revoked)
        stale = iso(NOW - datetime.timedelta(minutes=10))

        with pytest.raises(ValidationError):
            handler.process_event(self.make_event("license.revoked", {"id": "lic_1"}, timestamp=stale))

        revoked.assert_not_called()

    def test_missing_signature(self, handler):
        event = self.make_event("license.revoked", {"id": "lic_1"})
        del event["signature"]

        with pytest.raises(ValidationError) as exc_info:
            handler.process_event(event)

        assert exc_info.value.message == "Missing signature"

    def test_missing_timestamp(self, handler):
        event = self.make_event("license.revoked", {"id": "lic_1"})
        del event["timestamp"]

        with pytest.raises(ValidationError) as exc_info:
            handler.process_event(event)

        assert exc_info.value.message == "Missing timestamp"

    def test_invalid_data(self, handler):
        event = self.make_event("license.revoked", {"id": "lic_1"})
        event["data"] = ["not", "an", "object"]

        with pytest.raises(ValidationError):
            handler.process_event(event)

    def test_missing_data_signs_empty_object(self, handler):
        event = self.make_event("license.created", {})
        del event["data"]

        handler.process_event(event)
