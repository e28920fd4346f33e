"""Repository layer for data access.

This layer hides the HTTP transport behind the RequestClient protocol, so
services and the cache never touch httpx directly. This enables:
- Swapping the backend (real API, staging, in-process test app)
- Unit testing with fake clients
- A single place where HTTP failures are normalized into ApiClientError
"""

from itam_sync.protocols import RequestClient

from .api_client import ApiClient, serialize_params

__all__ = [
    "RequestClient",
    "ApiClient",
    "serialize_params",
]
