"""HTTP client for the inventory REST API.

Turns a logical request (method, path, query parameters, body) into an
httpx call against ``{base}/api/{version}`` and the response into either
decoded JSON or an ``ApiClientError``.

Error normalization:
    - non-2xx with an ``{"error": {...}}`` body: status, code, message and
      details are taken from the body
    - non-2xx with any other body: code ``HTTP_ERROR``, message
      ``HTTP {status}: {reason}``
    - transport or decoding failure, or a 2xx body that is not JSON: status 0, code
      ``NETWORK_ERROR``

This layer never retries.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from itam_sync.config import get_http_client, settings
from itam_sync.dto import ApiErrorBody, HealthStatus
from itam_sync.errors import HTTP_ERROR, NETWORK_ERROR, ApiClientError
from itam_sync.log import get_logger

logger = get_logger(__name__)


def serialize_params(params: Mapping[str, Any] | BaseModel | None) -> dict[str, str]:
    """Serialize query parameters, skipping entries whose value is None.

    Booleans are rendered as ``true``/``false`` and lists are joined with
    commas.
    """
    if params is None:
        return {}
    if isinstance(params, BaseModel):
        to_payload = getattr(params, "to_payload", None)
        params = to_payload() if to_payload else params.model_dump(by_alias=True, mode="json")

    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            query[key] = ",".join(str(v) for v in value)
        elif isinstance(value, Enum):
            query[key] = str(value.value)
        else:
            query[key] = str(value)
    return query


def _serialize_body(data: Any) -> Any:
    if data is None:
        return None
    if isinstance(data, BaseModel):
        to_payload = getattr(data, "to_payload", None)
        return to_payload() if to_payload else data.model_dump(by_alias=True, mode="json")
    return data


class ApiClient:
    """Async client for the inventory API.

    This class satisfies the RequestClient protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        async with ApiClient.create() as client:
            assets = await client.get("/hardware-assets", {"page": 1, "limit": 25})
            health = await client.check_health()
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: Server root, e.g. "http://localhost:8787". Defaults to settings.
            api_version: Version segment of the API prefix. Defaults to settings.
            timeout: Transport timeout in seconds. Defaults to settings.
            transport: Optional httpx transport (used by tests).
            headers: Extra headers sent with every request.
        """
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._api_version = api_version or settings.api_version
        self._timeout = timeout
        self._transport = transport
        self._headers = headers
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        base_url: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> "ApiClient":
        """Factory method to create an ApiClient with defaults from settings."""
        return cls(
            base_url=base_url,
            api_version=api_version,
            timeout=timeout,
            transport=transport,
            headers=headers,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = get_http_client(
                timeout=self._timeout,
                transport=self._transport,
                headers=self._headers,
            )
        return self._client

    @property
    def api_url(self) -> str:
        return f"{self._base_url}/api/{self._api_version}"

    @property
    def health_url(self) -> str:
        return f"{self._base_url}/health"

    async def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | BaseModel | None = None,
        data: Any = None,
    ) -> Any:
        """Perform a request against the versioned API.

        Args:
            method: HTTP method
            path: Path relative to the API root, starting with "/"
            params: Query parameters; None values are skipped
            data: JSON body (mapping, list or request model)

        Returns:
            The decoded JSON body; ``{}`` for 204 or empty responses

        Raises:
            ApiClientError: On non-2xx status or transport failure
        """
        return await self._send(method, f"{self.api_url}{path}", params=params, data=data)

    async def _send(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | BaseModel | None = None,
        data: Any = None,
    ) -> Any:
        body = _serialize_body(data)
        try:
            response = await self.client.request(
                method,
                url,
                params=serialize_params(params) or None,
                json=body,
            )
        except httpx.RequestError as e:
            error = ApiClientError(f"Network error: {e}", status=0, code=NETWORK_ERROR)
            logger.warning("api_request_failed", method=method, url=url, status=0, code=error.code)
            raise error from e

        if not response.is_success:
            error = self._error_from_response(response)
            logger.warning(
                "api_request_failed",
                method=method,
                url=url,
                status=error.status,
                code=error.code,
                details=error.details,
            )
            raise error

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise ApiClientError(
                f"Network error: invalid JSON response ({e})", status=0, code=NETWORK_ERROR
            ) from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ApiClientError:
        fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
        try:
            body = ApiErrorBody.model_validate(response.json())
        except (ValueError, ValidationError):
            return ApiClientError(fallback, status=response.status_code, code=HTTP_ERROR)

        return ApiClientError(
            body.error.message or fallback,
            status=response.status_code,
            code=body.error.code or HTTP_ERROR,
            details=body.error.details,
        )

    async def get(self, path: str, params: Mapping[str, Any] | BaseModel | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Any = None) -> Any:
        return await self.request("POST", path, data=data)

    async def put(self, path: str, data: Any = None) -> Any:
        return await self.request("PUT", path, data=data)

    async def patch(self, path: str, data: Any = None) -> Any:
        return await self.request("PATCH", path, data=data)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def check_health(self) -> HealthStatus:
        """Query the liveness endpoint (outside the versioned prefix).

        Returns:
            HealthStatus with status, timestamp and version

        Raises:
            ApiClientError: If the endpoint is unreachable or unhealthy
        """
        payload = await self._send("GET", self.health_url)
        return HealthStatus.model_validate(payload)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when the session ends.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
