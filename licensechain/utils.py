"""
Helper functions for the LicenseChain client library.

Validation, string, date, crypto, formatting, JSON and URL utilities shared
by the client, the webhook handler and embedding applications.
"""

import datetime
import hashlib
import hmac
import html
import json
import math
import re
import secrets
import string
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote, unquote, urlparse

import pydantic

from .constants import LICENSE_KEY_LENGTH, SUPPORTED_CURRENCIES
from .exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LICENSE_KEY_RE = re.compile(r"^[A-Za-z0-9]{%d}$" % LICENSE_KEY_LENGTH)
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_LICENSE_KEY_ALPHABET = string.ascii_uppercase + string.digits


# Validation

def validate_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def validate_license_key(license_key: str) -> bool:
    """Check for a 32 character alphanumeric license key."""
    return bool(_LICENSE_KEY_RE.match(license_key))


def validate_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))


def validate_amount(amount: float) -> bool:
    return amount > 0 and math.isfinite(amount)


def validate_currency(currency: str) -> bool:
    return currency.upper() in SUPPORTED_CURRENCIES


def validate_not_empty(value: str, field_name: str):
    """Raise ValidationError if value is empty or whitespace."""
    if not value or not value.strip():
        raise ValidationError(f"{field_name} cannot be empty")


def validate_positive(value: float, field_name: str):
    """Raise ValidationError if value is not strictly positive."""
    if value <= 0:
        raise ValidationError(f"{field_name} must be positive")


def validate_range(value: float, min_value: float, max_value: float, field_name: str):
    """Raise ValidationError if value lies outside [min_value, max_value]."""
    if value < min_value or value > max_value:
        raise ValidationError(f"{field_name} must be between {min_value} and {max_value}")


# Strings

def sanitize_input(text: str) -> str:
    """Escape HTML special characters (& < > " ')."""
    return html.escape(text, quote=True)


def sanitize_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    """
    Escape every string value in a metadata mapping.

    Nested mappings are sanitized recursively; strings directly inside lists
    are escaped, other values are kept as-is.
    """
    sanitized = {}
    for key, value in metadata.items():
        if isinstance(value, str):
            sanitized[key] = sanitize_input(value)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_input(item) if isinstance(item, str) else item
                for item in value
            ]
        elif isinstance(value, dict):
            sanitized[key] = sanitize_metadata(value)
        else:
            sanitized[key] = value
    return sanitized


def generate_license_key() -> str:
    return ''.join(secrets.choice(_LICENSE_KEY_ALPHABET) for _ in range(LICENSE_KEY_LENGTH))


def generate_uuid() -> str:
    return str(uuid.uuid4())


def capitalize_first(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:].lower()


def to_snake_case(text: str) -> str:
    return re.sub(r"([a-z])([A-Z])", r"\1_\2", text).lower()


def to_pascal_case(text: str) -> str:
    return ''.join(part.capitalize() for part in text.split('_'))


def truncate_string(text: str, max_length: int) -> str:
    """Cut text to max_length characters, ending with '...' when shortened."""
    if len(text) <= max_length:
        return text
    return text[:max(max_length - 3, 0)] + "..."


def slugify(text: str) -> str:
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip('-')


# Dates

def format_timestamp(timestamp: float) -> str:
    """Format a Unix timestamp as an ISO-8601 UTC string (seconds precision)."""
    date = datetime.datetime.fromtimestamp(timestamp, tz=datetime.timezone.utc)
    return date.strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_datetime(timestamp: str) -> Optional[datetime.datetime]:
    """
    Parse an ISO-8601 string into an aware datetime.

    A trailing 'Z' is accepted and naive values are taken as UTC.

    Returns:
        datetime, or None if the string is not ISO-8601
    """
    try:
        parsed = datetime.datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def parse_timestamp(timestamp: str) -> Optional[float]:
    """Parse an ISO-8601 string into a Unix timestamp, or None."""
    parsed = parse_datetime(timestamp)
    if parsed is None:
        return None
    return parsed.timestamp()


def get_current_timestamp() -> float:
    return time.time()


def get_current_date() -> str:
    return format_timestamp(get_current_timestamp())


# Crypto

def serialize_payload(data: Any) -> str:
    """
    Serialize webhook data to its canonical signed form.

    Compact separators and sorted keys.
    """
    return json.dumps(data, separators=(',', ':'), sort_keys=True)


def create_webhook_signature(payload: str, secret: str) -> str:
    """
    Generate the HMAC-SHA256 signature of a webhook payload.

    Args:
        payload: Exact payload string that is signed
        secret: Webhook secret

    Returns:
        Hex-encoded HMAC signature
    """
    mac = hmac.new(
        secret.encode('utf-8'),
        payload.encode('utf-8'),
        hashlib.sha256
    )
    return mac.hexdigest()


def verify_webhook_signature(payload: str, signature: str, secret: str) -> bool:
    """Verify a webhook signature using a constant-time comparison."""
    expected_signature = create_webhook_signature(payload, secret)
    return hmac.compare_digest(expected_signature.encode('utf-8'), signature.encode('utf-8'))


def sha256(data: str) -> str:
    return hashlib.sha256(data.encode('utf-8')).hexdigest()


def sha1(data: str) -> str:
    return hashlib.sha1(data.encode('utf-8')).hexdigest()


def md5(data: str) -> str:
    return hashlib.md5(data.encode('utf-8')).hexdigest()


# Formatting

def format_bytes(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    return f"{size:.1f} {units[unit_index]}"


def format_duration(seconds: float) -> str:
    """Render a duration as '45s', '2m 5s', '3h 20m' or '2d 4h'."""
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"
    return f"{int(seconds // 86400)}d {int((seconds % 86400) // 3600)}h"


def format_price(price: float, currency: str) -> str:
    return f"{price:.4f} {currency}"


# Collections

def chunk_array(items: Sequence[Any], chunk_size: int) -> List[List[Any]]:
    """Split items into consecutive lists of at most chunk_size elements."""
    if chunk_size <= 0:
        raise ValidationError("chunk_size must be positive")
    return [list(items[i:i + chunk_size]) for i in range(0, len(items), chunk_size)]


# JSON

def json_serialize(obj: Any) -> Optional[str]:
    """Pretty-print obj as JSON, or return None if it is not serializable."""
    try:
        return json.dumps(obj, indent=2)
    except (TypeError, ValueError):
        return None


def json_deserialize(json_string: str, target: Any) -> Optional[Any]:
    """
    Decode a JSON string into target (a pydantic model or typing construct).

    Returns:
        Decoded value, or None if the string is invalid or does not match
    """
    try:
        return pydantic.TypeAdapter(target).validate_json(json_string)
    except pydantic.ValidationError:
        return None


def is_valid_json(json_string: str) -> bool:
    try:
        json.loads(json_string)
    except ValueError:
        return False
    return True


# URLs

def is_valid_url(url: str) -> bool:
    """Check for an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(url)
    except (AttributeError, TypeError, ValueError):
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def url_encode(value: str) -> str:
    return quote(value, safe='')


def url_decode(value: str) -> str:
    return unquote(value)
