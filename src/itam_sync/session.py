"""Session composition root.

One InventorySession owns the API client and the query cache for the
lifetime of an application session and wires every service to them.
"""

import httpx

from itam_sync.cache import QueryCache
from itam_sync.log import get_logger
from itam_sync.repositories import ApiClient
from itam_sync.retry import RetryPolicy
from itam_sync.services import (
    HardwareAssetService,
    HealthMonitor,
    LicenseAssignmentService,
    LookupService,
    SoftwareLicenseService,
)

logger = get_logger(__name__)


class InventorySession:
    """Client, cache and services for one application session.

    Example:
        ```python
        async with InventorySession.create() as session:
            page = await session.hardware_assets.get_all({"status": "deployed"})
            await session.software_licenses.create(request)
            licenses = await session.software_licenses.get_all()
        ```
    """

    def __init__(
        self,
        client: ApiClient,
        cache: QueryCache,
        query_retry: RetryPolicy | None = None,
        mutation_retry: RetryPolicy | None = None,
        health_retry: RetryPolicy | None = None,
        health_interval: float | None = None,
        poll_health: bool = False,
    ) -> None:
        """Initialize the session.

        Args:
            client: API client (required).
            cache: Query cache (required). Owned by the session from now on.
            query_retry: Retry policy for reads. Defaults to QUERY_RETRY.
            mutation_retry: Retry policy for writes. Defaults to MUTATION_RETRY.
            health_retry: Retry policy for health checks. Defaults to HEALTH_RETRY.
            health_interval: Seconds between health polls. Defaults to settings.
            poll_health: Start health polling when the session is entered.
        """
        self.client = client
        self.cache = cache
        self._poll_health = poll_health

        retries = {"query_retry": query_retry, "mutation_retry": mutation_retry}
        self.hardware_assets = HardwareAssetService(client, cache, **retries)
        self.software_licenses = SoftwareLicenseService(client, cache, **retries)
        self.license_assignments = LicenseAssignmentService(
            client, cache, licenses=self.software_licenses, **retries
        )
        self.lookups = LookupService(client, cache, **retries)
        self.health = HealthMonitor(client, cache, interval=health_interval, retry=health_retry)

    @classmethod
    def create(
        cls,
        base_url: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
        stale_time: float | None = None,
        gc_time: float | None = None,
        gc_interval: float | None = None,
        query_retry: RetryPolicy | None = None,
        mutation_retry: RetryPolicy | None = None,
        health_retry: RetryPolicy | None = None,
        health_interval: float | None = None,
        poll_health: bool = False,
    ) -> "InventorySession":
        """Factory method building the client and cache from settings.

        Args:
            base_url: API server root. If None, uses settings.
            api_version: API version. If None, uses settings.
            timeout: Transport timeout in seconds. If None, uses settings.
            transport: Optional httpx transport (used by tests).
            headers: Extra headers sent with every request.
            stale_time: Default cache TTL. If None, uses settings.
            gc_time: Cache idle purge window. If None, uses settings.
            gc_interval: Seconds between cache purges. If None, uses settings.
            query_retry: Retry policy for reads. Defaults to QUERY_RETRY.
            mutation_retry: Retry policy for writes. Defaults to MUTATION_RETRY.
            health_retry: Retry policy for health checks. Defaults to HEALTH_RETRY.
            health_interval: Seconds between health polls. If None, uses settings.
            poll_health: Start health polling when the session is entered.

        Returns:
            Configured InventorySession
        """
        client = ApiClient.create(
            base_url=base_url,
            api_version=api_version,
            timeout=timeout,
            transport=transport,
            headers=headers,
        )
        cache = QueryCache(stale_time=stale_time, gc_time=gc_time, gc_interval=gc_interval)
        return cls(
            client=client,
            cache=cache,
            query_retry=query_retry,
            mutation_retry=mutation_retry,
            health_retry=health_retry,
            health_interval=health_interval,
            poll_health=poll_health,
        )

    async def start(self) -> None:
        self.cache.start()
        if self._poll_health:
            self.health.start()
        logger.info("session_started", api_url=self.client.api_url)

    async def close(self) -> None:
        """Tear down: stop polling, drop the cache, close the HTTP client."""
        await self.health.stop()
        await self.cache.close()
        await self.client.close()
        logger.info("session_closed")

    async def __aenter__(self) -> "InventorySession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
