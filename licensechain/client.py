"""
LicenseChain API client.

This module provides the request pipeline (URL and header construction,
bounded retries with exponential backoff, response classification and
decoding) and typed methods for the license, user, product and webhook
endpoints.
"""

import functools
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import urlencode, urljoin

import pydantic
import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import ClientConfig
from .constants import (
    API_VERSION,
    CONTENT_TYPE_JSON,
    DEFAULT_CONFIG,
    HEADER_API_VERSION,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    HEADER_PLATFORM,
    HEADER_USER_AGENT,
    PLATFORM,
    USER_AGENT,
)
from .exceptions import (
    ConfigurationError,
    HTTPError,
    InvalidResponseError,
    InvalidUrlError,
    NetworkError,
    UnknownError,
    ValidationError,
)
from .models import (
    APIModel,
    CreateLicenseRequest,
    CreateProductRequest,
    CreateUserRequest,
    CreateWebhookRequest,
    DataEnvelope,
    License,
    LicenseListResponse,
    LicenseStats,
    Metadata,
    Product,
    ProductListResponse,
    ProductStats,
    User,
    UserListResponse,
    UserStats,
    VerifyLicenseResponse,
    Webhook,
)
from .utils import is_valid_url, url_encode, validate_not_empty

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error"


@dataclass(frozen=True)
class RequestSpec:
    """
    A single logical API call.

    Attributes:
        method: HTTP method
        path: URL path relative to the base URL
        params: Query parameters; values are stringified, None values dropped
        body: JSON-serializable body or APIModel
    """

    method: str
    path: str
    params: Optional[Mapping[str, Any]] = None
    body: Any = None


@functools.lru_cache(maxsize=None)
def _type_adapter(target: Any) -> pydantic.TypeAdapter:
    return pydantic.TypeAdapter(target)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class LicenseChainClient:
    """
    Client for the LicenseChain REST API.

    Transport failures and bodies that cannot be parsed or decoded are
    retried up to
    ``max_retries`` attempts with 1s, 2s, 4s, ... backoff. Non-2xx
    responses raise HTTPError immediately.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        **options,
    ):
        """
        Initialize LicenseChain client.

        Args:
            api_key: LicenseChain API key
            base_url: Service root (defaults to https://api.licensechain.app)
            config: Prebuilt ClientConfig; excludes api_key, base_url and options
            session: requests.Session to use (one is created if omitted)
            sleep: Function used for backoff delays
            **options: Configuration options (timeout, max_retries)

        Raises:
            InvalidApiKeyError: If api_key is empty
            InvalidUrlError: If base_url is not an http(s) URL
            ConfigurationError: If an option is unknown or out of range, or
                config is combined with other settings
        """
        if config is not None:
            if api_key is not None or base_url is not None or options:
                raise ConfigurationError(
                    "config cannot be combined with api_key, base_url or options"
                )
        else:
            unknown = set(options) - set(DEFAULT_CONFIG)
            if unknown:
                raise ConfigurationError(f"unknown option(s): {', '.join(sorted(unknown))}")

            # Merge default config with user overrides
            settings = {**DEFAULT_CONFIG, **options}
            if base_url is not None:
                settings['base_url'] = base_url
            config = ClientConfig(api_key=api_key or '', **settings)

        self.config = config
        self.session = session or requests.Session()
        self._sleep = sleep

    @classmethod
    def create(cls, api_key: str, base_url: Optional[str] = None, **kwargs) -> "LicenseChainClient":
        """Create a client with default settings."""
        return cls(api_key, base_url, **kwargs)

    @classmethod
    def from_environment(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **kwargs,
    ) -> "LicenseChainClient":
        """
        Create a client from LICENSECHAIN_API_KEY and LICENSECHAIN_BASE_URL.

        Settings passed as keyword arguments (base_url, timeout, max_retries)
        take precedence over the environment; session and sleep are passed
        through to the constructor.
        """
        overrides = {
            key: kwargs.pop(key)
            for key in list(kwargs)
            if key in DEFAULT_CONFIG
        }
        return cls(config=ClientConfig.from_env(environ, **overrides), **kwargs)

    # Request pipeline

    def execute(self, spec: RequestSpec, target: Any = dict) -> Any:
        """
        Execute a request and decode its body.

        Args:
            spec: Request to perform
            target: Decode target (pydantic model or typing construct);
                None discards the body

        Returns:
            The decoded body

        Raises:
            InvalidUrlError: If the URL cannot be composed
            ValidationError: If the body is not JSON serializable
            NetworkError: If every attempt failed in transport
            InvalidResponseError: If the body cannot be parsed or decoded
            HTTPError: If the server answered with a non-2xx status
        """
        url = self._build_url(spec.path, spec.params)
        headers = self._build_headers()
        body = self._prepare_request_body(spec.body)

        retryer = Retrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=1, exp_base=2),
            retry=retry_if_exception_type((NetworkError, InvalidResponseError)),
            before_sleep=functools.partial(self._log_retry, spec),
            sleep=self._sleep,
            retry_error_callback=self._raise_last_error,
        )
        return retryer(self._attempt, spec.method, url, headers, body, target)

    def _attempt(self, method: str, url: str, headers: Dict[str, str],
                 body: Optional[bytes], target: Any) -> Any:
        return self._decode(self._send(method, url, headers, body), target)

    def _build_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        url = urljoin(self.config.base_url + '/', path.lstrip('/'))

        if params:
            query = urlencode([
                (key, _stringify(value))
                for key, value in params.items()
                if value is not None
            ])
            if query:
                url = f"{url}{'&' if '?' in url else '?'}{query}"

        if not is_valid_url(url):
            raise InvalidUrlError(url)
        return url

    def _build_headers(self) -> Dict[str, str]:
        return {
            HEADER_AUTHORIZATION: f"Bearer {self.config.api_key}",
            HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
            HEADER_API_VERSION: API_VERSION,
            HEADER_PLATFORM: PLATFORM,
            HEADER_USER_AGENT: USER_AGENT,
        }

    def _prepare_request_body(self, body: Any) -> Optional[bytes]:
        """Serialize the request body to compact JSON."""
        if body is None:
            return None
        if isinstance(body, APIModel):
            body = body.to_dict()
        try:
            return json.dumps(body, separators=(',', ':'), allow_nan=False).encode('utf-8')
        except (TypeError, ValueError) as e:
            raise ValidationError(f"request body is not JSON serializable: {e}") from e

    def _send(self, method: str, url: str, headers: Dict[str, str], body: Optional[bytes]) -> Any:
        """Perform one attempt and return the parsed JSON payload."""
        logger.debug("LicenseChain request", extra={"method": method, "url": url})
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                data=body,
                timeout=self.config.timeout,
            )
        except (requests.exceptions.InvalidURL,
                requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema) as e:
            raise InvalidUrlError(str(e)) from e
        except requests.RequestException as e:
            raise NetworkError(e) from e

        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> Any:
        status_code = getattr(response, 'status_code', None)
        if not isinstance(status_code, int):
            raise InvalidResponseError("response has no status code")

        content = response.content or b''

        if 200 <= status_code < 300:
            if not content.strip():
                return {}
            try:
                return json.loads(content)
            except ValueError as e:
                raise InvalidResponseError(f"body is not valid JSON: {e}") from e

        message = self._extract_error_message(content)
        logger.info(
            "LicenseChain request rejected",
            extra={"status_code": status_code, "error": message},
        )
        raise HTTPError(status_code, message)

    @staticmethod
    def _extract_error_message(content: bytes) -> str:
        try:
            payload = json.loads(content)
        except ValueError:
            return UNKNOWN_ERROR_MESSAGE
        if isinstance(payload, dict) and isinstance(payload.get('error'), str):
            return payload['error']
        return UNKNOWN_ERROR_MESSAGE

    @staticmethod
    def _decode(payload: Any, target: Any) -> Any:
        if target is None:
            return None
        try:
            return _type_adapter(target).validate_python(payload)
        except pydantic.ValidationError as e:
            raise InvalidResponseError(
                f"unexpected response shape ({e.error_count()} error(s))"
            ) from e

    @staticmethod
    def _raise_last_error(retry_state: RetryCallState):
        """Raise the error of the final attempt once retries are exhausted."""
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if error is None:
            raise UnknownError()
        raise error

    @staticmethod
    def _log_retry(spec: RequestSpec, retry_state: RetryCallState):
        """Log retry attempts with context."""
        logger.warning(
            "Retrying LicenseChain request",
            extra={
                "attempt": retry_state.attempt_number,
                "method": spec.method,
                "path": spec.path,
                "delay": retry_state.next_action.sleep if retry_state.next_action else None,
                "error": str(retry_state.outcome.exception()) if retry_state.outcome else None,
            },
        )

    # License management

    def create_license(self, user_id: str, product_id: str, metadata: Optional[Metadata] = None) -> License:
        request = CreateLicenseRequest(user_id=user_id, product_id=product_id, metadata=metadata)
        return self.execute(RequestSpec('POST', '/licenses', body=request), License)

    def get_license(self, license_id: str) -> License:
        return self.execute(RequestSpec('GET', self._resource_path('licenses', license_id)), License)

    def update_license(self, license_id: str, updates: Dict[str, Any]) -> License:
        spec = RequestSpec('PUT', self._resource_path('licenses', license_id), body=updates)
        return self.execute(spec, License)

    def revoke_license(self, license_id: str) -> None:
        self.execute(RequestSpec('DELETE', self._resource_path('licenses', license_id)), None)

    def validate_license(self, license_key: str) -> bool:
        """
        Check a license key against the service.

        Returns:
            True if the service reports the key as valid
        """
        spec = RequestSpec('POST', '/licenses/verify', body={'key': license_key})
        return self.execute(spec, VerifyLicenseResponse).valid

    def list_user_licenses(self, user_id: str, page: int = 1, limit: int = 10) -> LicenseListResponse:
        params = {'user_id': user_id, 'page': page, 'limit': limit}
        return self.execute(RequestSpec('GET', '/licenses', params=params), LicenseListResponse)

    def get_license_stats(self) -> LicenseStats:
        envelope = self.execute(RequestSpec('GET', '/licenses/stats'), DataEnvelope[LicenseStats])
        return envelope.data if envelope.data is not None else LicenseStats()

    # User management

    def create_user(self, email: str, name: str, metadata: Optional[Metadata] = None) -> User:
        request = CreateUserRequest(email=email, name=name, metadata=metadata)
        return self.execute(RequestSpec('POST', '/users', body=request), User)

    def get_user(self, user_id: str) -> User:
        return self.execute(RequestSpec('GET', self._resource_path('users', user_id)), User)

    def update_user(self, user_id: str, updates: Dict[str, Any]) -> User:
        return self.execute(RequestSpec('PUT', self._resource_path('users', user_id), body=updates), User)

    def delete_user(self, user_id: str) -> None:
        self.execute(RequestSpec('DELETE', self._resource_path('users', user_id)), None)

    def list_users(self, page: int = 1, limit: int = 10) -> UserListResponse:
        params = {'page': page, 'limit': limit}
        return self.execute(RequestSpec('GET', '/users', params=params), UserListResponse)

    def get_user_stats(self) -> UserStats:
        envelope = self.execute(RequestSpec('GET', '/users/stats'), DataEnvelope[UserStats])
        return envelope.data if envelope.data is not None else UserStats()

    # Product management

    def create_product(
        self,
        name: str,
        description: Optional[str],
        price: float,
        currency: str,
        metadata: Optional[Metadata] = None,
    ) -> Product:
        request = CreateProductRequest(
            name=name,
            description=description,
            price=price,
            currency=currency,
            metadata=metadata,
        )
        return self.execute(RequestSpec('POST', '/products', body=request), Product)

    def get_product(self, product_id: str) -> Product:
        return self.execute(RequestSpec('GET', self._resource_path('products', product_id)), Product)

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Product:
        spec = RequestSpec('PUT', self._resource_path('products', product_id), body=updates)
        return self.execute(spec, Product)

    def delete_product(self, product_id: str) -> None:
        self.execute(RequestSpec('DELETE', self._resource_path('products', product_id)), None)

    def list_products(self, page: int = 1, limit: int = 10) -> ProductListResponse:
        params = {'page': page, 'limit': limit}
        return self.execute(RequestSpec('GET', '/products', params=params), ProductListResponse)

    def get_product_stats(self) -> ProductStats:
        envelope = self.execute(RequestSpec('GET', '/products/stats'), DataEnvelope[ProductStats])
        return envelope.data if envelope.data is not None else ProductStats()

    # Webhook management

    def create_webhook(self, url: str, events: List[str], secret: Optional[str] = None) -> Webhook:
        request = CreateWebhookRequest(url=url, events=events, secret=secret)
        return self.execute(RequestSpec('POST', '/webhooks', body=request), Webhook)

    def get_webhook(self, webhook_id: str) -> Webhook:
        return self.execute(RequestSpec('GET', self._resource_path('webhooks', webhook_id)), Webhook)

    def update_webhook(self, webhook_id: str, updates: Dict[str, Any]) -> Webhook:
        spec = RequestSpec('PUT', self._resource_path('webhooks', webhook_id), body=updates)
        return self.execute(spec, Webhook)

    def delete_webhook(self, webhook_id: str) -> None:
        self.execute(RequestSpec('DELETE', self._resource_path('webhooks', webhook_id)), None)

    def list_webhooks(self) -> List[Webhook]:
        envelope = self.execute(RequestSpec('GET', '/webhooks'), DataEnvelope[List[Webhook]])
        return envelope.data if envelope.data is not None else []

    # Health check

    def ping(self) -> Dict[str, Any]:
        return self.execute(RequestSpec('GET', '/ping'), Dict[str, Any])

    def health(self) -> Dict[str, Any]:
        return self.execute(RequestSpec('GET', '/health'), Dict[str, Any])

    @staticmethod
    def _resource_path(collection: str, resource_id: str) -> str:
        validate_not_empty(resource_id, f"{collection} id")
        return f"/{collection}/{url_encode(resource_id)}"

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
