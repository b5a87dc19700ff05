"""
Client configuration for the LicenseChain client library.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import DEFAULT_CONFIG, ENV_API_KEY, ENV_BASE_URL
from .exceptions import ConfigurationError, InvalidApiKeyError, InvalidUrlError
from .utils import is_valid_url


@dataclass(frozen=True, repr=False)
class ClientConfig:
    """
    Immutable settings shared by every call made through one client.

    Attributes:
        api_key: Secret API key sent as a bearer token
        base_url: Service root, without trailing slash
        timeout: Per-attempt HTTP timeout in seconds
        max_retries: Maximum attempts per logical call
    """

    api_key: str
    base_url: str = DEFAULT_CONFIG['base_url']
    timeout: float = DEFAULT_CONFIG['timeout']
    max_retries: int = DEFAULT_CONFIG['max_retries']

    def __post_init__(self):
        # Normalise before validation; frozen dataclasses need object.__setattr__
        object.__setattr__(self, 'base_url', (self.base_url or '').rstrip('/'))
        self.validate()

    def validate(self):
        """Validate configuration values."""
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise InvalidApiKeyError("api_key cannot be empty")

        if not is_valid_url(self.base_url):
            raise InvalidUrlError(f"base_url must be an http(s) URL, got {self.base_url!r}")

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ConfigurationError("timeout must be a number")

        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ConfigurationError("max_retries must be an integer")

        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Explicit values taking precedence over the environment

        Returns:
            ClientConfig instance
        """
        if environ is None:
            environ = os.environ

        values = {
            'api_key': environ.get(ENV_API_KEY, ''),
            'base_url': environ.get(ENV_BASE_URL) or DEFAULT_CONFIG['base_url'],
        }
        values.update(overrides)
        return cls(**values)

    def __repr__(self) -> str:
        # api_key is masked
        return (
            f"ClientConfig(api_key='***', base_url={self.base_url!r}, "
            f"timeout={self.timeout!r}, max_retries={self.max_retries!r})"
        )
