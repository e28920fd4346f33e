"""Request client protocol.

Defines the interface services use to reach the inventory API. The default
implementation is ``ApiClient`` (httpx); tests may substitute any object
with the same methods.
"""

from typing import Any, Protocol, runtime_checkable

from itam_sync.dto import HealthStatus


@runtime_checkable
class RequestClient(Protocol):
    """Protocol for the inventory REST client.

    Every method either returns the decoded JSON body or raises
    ``ApiClientError``. Implementations must not retry; retry policy
    belongs to the caller.
    """

    async def get(self, path: str, params: Any = None) -> Any:
        """GET ``path`` with optional query parameters.

        Args:
            path: Path relative to the versioned API root, e.g. "/users"
            params: Mapping or query model; None values are not serialized

        Returns:
            Decoded JSON body
        """
        ...

    async def post(self, path: str, data: Any = None) -> Any:
        """POST a JSON body to ``path``."""
        ...

    async def put(self, path: str, data: Any = None) -> Any:
        """PUT a JSON body to ``path``."""
        ...

    async def patch(self, path: str, data: Any = None) -> Any:
        """PATCH a JSON body to ``path``."""
        ...

    async def delete(self, path: str) -> Any:
        """DELETE ``path``; an empty response decodes to ``{}``."""
        ...

    async def check_health(self) -> HealthStatus:
        """Query the liveness endpoint outside the versioned prefix."""
        ...
