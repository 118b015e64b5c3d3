"""Base HTTP client for Assistant Bridge.

Every call to an assistant service goes through ``BaseAPIClient.request``:
HTTP basic auth, the mandatory ``version`` query parameter, request logging,
and translation of error statuses into ``ServiceError`` subclasses. Calls are
made once; there is no retry layer.
"""

import time
from typing import Any

import httpx

from assistant_migration.client.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NetworkError,
    RateLimitError,
    ResourceNotFoundError,
    ServerError,
    ServiceError,
)
from assistant_migration.utils.logging import (
    get_logger,
    log_api_request,
    sanitize_payload,
    should_log_payloads,
    truncate_payload,
)

logger = get_logger(__name__)

DEFAULT_MAX_CONNECTIONS = 50
DEFAULT_MAX_KEEPALIVE_CONNECTIONS = 20

# Status code -> (exception type, message prefix)
STATUS_ERRORS: dict[int, tuple[type[ServiceError], str]] = {
    401: (AuthenticationError, "Authentication failed"),
    403: (AuthorizationError, "Authorization failed"),
    404: (ResourceNotFoundError, "Workspace not found"),
    409: (ConflictError, "Workspace conflict"),
}


def _error_body(response: httpx.Response) -> dict[str, Any]:
    """Decode an error body; the service answers ``{"error": ..., "code": ...}``."""
    try:
        body = response.json()
    except ValueError:
        return {"error": response.text}
    return body if isinstance(body, dict) else {"error": str(body)}


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("Retry-After", "")
    return int(value) if value.isdigit() else None


def raise_for_service_error(response: httpx.Response) -> None:
    """Raise the ServiceError subclass matching an error response.

    Raises:
        AuthenticationError: 401
        AuthorizationError: 403
        ResourceNotFoundError: 404
        ConflictError: 409
        RateLimitError: 429
        ServerError: 5xx
        ServiceError: any other status >= 400
    """
    status = response.status_code
    if status < 400:
        return

    body = _error_body(response)
    detail = body.get("error") or body.get("message") or "Unknown error"

    if status in STATUS_ERRORS:
        error_type, prefix = STATUS_ERRORS[status]
        raise error_type(f"{prefix}: {detail}", status_code=status, response=body)
    if status == 429:
        raise RateLimitError(
            f"Rate limit exceeded: {detail}",
            status_code=status,
            response=body,
            retry_after=_retry_after(response),
        )
    if status >= 500:
        raise ServerError(f"Server error: {detail}", status_code=status, response=body)
    raise ServiceError(f"API error: {detail}", status_code=status, response=body)


class BaseAPIClient:
    """Async client bound to one assistant service instance."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        version: str,
        verify_ssl: bool = True,
        timeout: int = 60,
        max_connections: int | None = None,
        max_keepalive_connections: int | None = None,
        log_payloads: bool = False,
        max_payload_size: int = 10000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize base API client.

        Args:
            base_url: Service instance URL; endpoints are resolved below it
            username: Basic auth user name ("apikey" for API key auth)
            password: API key or password
            version: API version date sent on every call
            verify_ssl: Whether to verify SSL certificates
            timeout: Request timeout in seconds
            max_connections: Connection pool size
            max_keepalive_connections: Keep-alive pool size
            log_payloads: Log request/response bodies at DEBUG level
            max_payload_size: Characters of a body to log before truncation
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.version = version
        self.log_payloads = log_payloads
        self.max_payload_size = max_payload_size

        limits = httpx.Limits(
            max_connections=max_connections or DEFAULT_MAX_CONNECTIONS,
            max_keepalive_connections=max_keepalive_connections
            or DEFAULT_MAX_KEEPALIVE_CONNECTIONS,
        )
        self.client = httpx.AsyncClient(
            base_url=f"{self.base_url}/",
            auth=httpx.BasicAuth(username, password),
            headers={"Accept": "application/json"},
            params={"version": version},
            timeout=httpx.Timeout(timeout, connect=10.0),
            limits=limits,
            verify=verify_ssl,
            transport=transport,
        )

        logger.info(
            "client_initialized",
            base_url=self.base_url,
            version=version,
            max_connections=limits.max_connections,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one request and return its decoded JSON body.

        Args:
            method: HTTP method
            endpoint: Path relative to the service URL (``v1/workspaces/...``)
            params: Query parameters, merged with ``version``
            json_data: JSON request body

        Returns:
            Response body, ``{}`` when empty

        Raises:
            NetworkError: Timeout or transport failure
            ServiceError: Error status (see ``raise_for_service_error``) or a
                success body that is not JSON
        """
        endpoint = endpoint.lstrip("/")
        payload_logging = should_log_payloads(self.log_payloads)

        if payload_logging and json_data is not None:
            logger.debug(
                "api_request_payload",
                method=method,
                endpoint=endpoint,
                payload=truncate_payload(sanitize_payload(json_data), self.max_payload_size),
            )

        started = time.monotonic()
        try:
            response = await self.client.request(method, endpoint, params=params, json=json_data)
        except httpx.TimeoutException as e:
            logger.error("request_timeout", method=method, endpoint=endpoint, error=str(e))
            raise NetworkError(f"Request timeout: {e}") from e
        except httpx.TransportError as e:
            logger.error("network_error", method=method, endpoint=endpoint, error=str(e))
            raise NetworkError(f"Network error: {e}") from e

        log_api_request(
            logger,
            method=method,
            url=f"{self.base_url}/{endpoint}",
            status_code=response.status_code,
            duration_ms=(time.monotonic() - started) * 1000,
        )
        if payload_logging and response.text:
            logger.debug(
                "api_response_payload",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                payload=response.text[: self.max_payload_size],
                payload_size=len(response.text),
            )

        raise_for_service_error(response)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "invalid_response_body",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise ServiceError(
                f"Response body is not JSON: {response.text[:200]}",
                status_code=response.status_code,
            ) from e

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self.request("POST", endpoint, params=params, json_data=json_data)

    async def delete(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.request("DELETE", endpoint, params=params)

    async def close(self) -> None:
        """Close the connection pool."""
        await self.client.aclose()
        logger.info("client_closed", base_url=self.base_url)

    async def __aenter__(self) -> "BaseAPIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
