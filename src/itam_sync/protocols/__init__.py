"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Driving services with any HTTP client that speaks the REST contract
- Unit testing with fake clients and listeners
- Clear separation between the cache and its consumers

Usage:
    ```python
    from itam_sync.protocols import RequestClient

    client: RequestClient = ApiClient()  # works
    client: RequestClient = FakeClient()  # also works
    ```
"""

from .cache_listener import CacheListener
from .request_client import RequestClient

__all__ = [
    "CacheListener",
    "RequestClient",
]
