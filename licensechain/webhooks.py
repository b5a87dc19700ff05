"""
Webhook verification and dispatch for LicenseChain deliveries.

A delivery is a JSON object with ``type``, ``data``, ``signature`` and
``timestamp``. The signature is the hex HMAC-SHA256 of the canonical JSON
form of ``data`` keyed by the webhook secret.
"""

import datetime
import functools
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from .constants import DEFAULT_WEBHOOK_TOLERANCE, WebhookEvents
from .exceptions import AuthenticationError, ConfigurationError, ValidationError
from .utils import capitalize_first, parse_datetime, serialize_payload, verify_webhook_signature

EventHandler = Callable[[Dict[str, Any]], Any]


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class WebhookHandler:
    """
    Verifies inbound webhook deliveries and dispatches them by event type.

    Every type in WebhookEvents has a default handler that logs the event;
    applications replace them through ``handlers``, ``register`` or ``on``.
    """

    def __init__(
        self,
        secret: str,
        tolerance: float = DEFAULT_WEBHOOK_TOLERANCE,
        handlers: Optional[Mapping[str, EventHandler]] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ):
        """
        Initialize webhook handler.

        Args:
            secret: Webhook signing secret
            tolerance: Maximum timestamp skew in seconds (inclusive)
            handlers: Event type to handler overrides
            logger: Sink for event and dispatch logging
            clock: Returns the current aware datetime
        """
        if not secret:
            raise ConfigurationError("secret cannot be empty")
        if tolerance < 0:
            raise ConfigurationError("tolerance cannot be negative")

        self.secret = secret
        self.tolerance = tolerance
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock

        self._handlers: Dict[str, EventHandler] = {
            event_type: functools.partial(self._log_event, event_type)
            for event_type in WebhookEvents.ALL
        }
        if handlers:
            self._handlers.update(handlers)

    def register(self, event_type: str, handler: EventHandler):
        """Register handler for event_type, replacing any existing one."""
        self._handlers[event_type] = handler

    def on(self, event_type: str) -> Callable[[EventHandler], EventHandler]:
        """Decorator form of register()."""
        def decorator(handler: EventHandler) -> EventHandler:
            self.register(event_type, handler)
            return handler
        return decorator

    def verify_signature(self, payload: str, signature: str) -> bool:
        """
        Verify the HMAC-SHA256 signature of a raw payload.

        Args:
            payload: Exact payload string that was signed
            signature: Hex-encoded signature to verify

        Returns:
            True if signature is valid
        """
        if not isinstance(payload, str) or not isinstance(signature, str):
            return False
        return verify_webhook_signature(payload, signature, self.secret)

    def verify_timestamp(self, timestamp: str):
        """
        Verify timestamp is within the tolerance window.

        Raises:
            ValidationError: If timestamp is not ISO-8601 or is too far from now
        """
        webhook_time = parse_datetime(timestamp)
        if webhook_time is None:
            raise ValidationError("Invalid timestamp format")

        time_diff = abs((self._clock() - webhook_time).total_seconds())
        if time_diff > self.tolerance:
            raise ValidationError(f"Webhook timestamp too old: {time_diff:.0f} seconds")

    def verify_webhook(self, payload: str, signature: str, timestamp: str):
        """
        Verify a delivery: timestamp first, then signature.

        Raises:
            ValidationError: If the timestamp is invalid or stale
            AuthenticationError: If the signature does not match
        """
        self.verify_timestamp(timestamp)

        if not self.verify_signature(payload, signature):
            raise AuthenticationError("Invalid webhook signature")

    def process_event(self, event_data: Mapping[str, Any]) -> Any:
        """
        Verify a delivery and dispatch it to the handler for its type.

        Args:
            event_data: Decoded webhook delivery

        Returns:
            The handler's return value, or None for unknown event types

        Raises:
            ValidationError: If fields are missing or the timestamp is stale
            AuthenticationError: If the signature does not match
        """
        data = event_data.get('data')
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError("Invalid event data")

        signature = event_data.get('signature')
        if not isinstance(signature, str):
            raise ValidationError("Missing signature")

        timestamp = event_data.get('timestamp')
        if not isinstance(timestamp, str):
            raise ValidationError("Missing timestamp")

        try:
            payload = serialize_payload(data)
        except (TypeError, ValueError) as e:
            raise ValidationError("Invalid event data") from e

        self.verify_webhook(payload, signature, timestamp)

        event_type = event_data.get('type') or ''
        handler = self._handlers.get(event_type) if isinstance(event_type, str) else None
        if handler is None:
            self.logger.warning("Unknown webhook event type: %s", event_type)
            return None

        return handler(dict(event_data))

    def _log_event(self, event_type: str, event_data: Dict[str, Any]):
        resource, _, action = event_type.partition('.')
        data = event_data.get('data') or {}
        event_id = event_data.get('id') or data.get('id') or 'unknown'
        self.logger.info("%s %s: %s", capitalize_first(resource), action, event_id)
