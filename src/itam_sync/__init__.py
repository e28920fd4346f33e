"""itam-sync - data synchronization layer for an IT asset management dashboard.

This package provides a layered architecture for talking to the inventory
REST API with client-side caching:

Layers:
    - protocols: Interface contracts (RequestClient, CacheListener)
    - repositories: Data access implementations (ApiClient over httpx)
    - cache: Key-addressed TTL cache with request coalescing (QueryCache)
    - services: One service per resource, reads cached, writes invalidating
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from itam_sync import InventorySession

    async with InventorySession.create() as session:
        page = await session.hardware_assets.get_all({"page": 1, "limit": 25})
    ```
"""

from itam_sync.cache import QueryCache, Subscription
from itam_sync.config import get_http_client, settings
from itam_sync.dto import (
    HardwareAsset,
    LicenseAssignment,
    SoftwareLicense,
)
from itam_sync.entities import CacheEntryEntity, CacheEvent, MutationRecord
from itam_sync.errors import ApiClientError, LicenseSeatsExhaustedError
from itam_sync.keys import QueryKeys, make_key
from itam_sync.log import configure_logging, get_logger
from itam_sync.protocols import CacheListener, RequestClient
from itam_sync.repositories import ApiClient
from itam_sync.retry import RetryPolicy, is_retryable
from itam_sync.services import (
    HardwareAssetService,
    HealthMonitor,
    LicenseAssignmentService,
    LookupService,
    SoftwareLicenseService,
)
from itam_sync.session import InventorySession

__all__ = [
    # Configuration
    "settings",
    "get_http_client",
    "configure_logging",
    "get_logger",
    # Protocols (interfaces)
    "RequestClient",
    "CacheListener",
    # Session
    "InventorySession",
    # Cache
    "QueryCache",
    "Subscription",
    "QueryKeys",
    "make_key",
    "RetryPolicy",
    "is_retryable",
    # Services
    "HardwareAssetService",
    "SoftwareLicenseService",
    "LicenseAssignmentService",
    "LookupService",
    "HealthMonitor",
    # Repositories (data access)
    "ApiClient",
    # Errors
    "ApiClientError",
    "LicenseSeatsExhaustedError",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheEvent",
    "MutationRecord",
    # DTOs (API contracts)
    "HardwareAsset",
    "SoftwareLicense",
    "LicenseAssignment",
]
