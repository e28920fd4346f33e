"""Periodic liveness polling of the API server."""

import asyncio
import contextlib

from itam_sync.cache import QueryCache
from itam_sync.config import settings
from itam_sync.dto import HealthStatus
from itam_sync.keys import HEALTH_KEY
from itam_sync.log import get_logger
from itam_sync.protocols import RequestClient
from itam_sync.retry import HEALTH_RETRY, RetryPolicy

logger = get_logger(__name__)


class HealthMonitor:
    """Polls the liveness endpoint on a fixed interval.

    Results go through the session cache under ``("health",)`` with a zero
    TTL, so every poll hits the server while concurrent checks still share
    one request and subscribers to the key see each new status.
    """

    def __init__(
        self,
        client: RequestClient,
        cache: QueryCache,
        interval: float | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._interval = settings.health_poll_interval if interval is None else interval
        self._retry = retry or HEALTH_RETRY
        self._task: asyncio.Task | None = None
        self.latest: HealthStatus | None = None
        self.last_error: Exception | None = None

    @property
    def is_healthy(self) -> bool:
        return self.last_error is None and self.latest is not None and self.latest.is_healthy

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self) -> HealthStatus:
        """Run one health check.

        Raises:
            ApiClientError: If the server is unreachable after retries
        """
        was_healthy = self.is_healthy
        try:
            status = await self._cache.read(
                HEALTH_KEY, self._client.check_health, ttl=0, retry=self._retry
            )
        except Exception as e:
            self.last_error = e
            logger.warning("api_health_check_failed", error=repr(e))
            raise

        self.latest = status
        self.last_error = None
        if not was_healthy:
            logger.info("api_healthy", status=status.status, version=status.version)
        return status

    async def _poll(self) -> None:
        while True:
            try:
                await self.check()
            except Exception:
                # recorded in last_error and logged by check()
                pass
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start polling (idempotent)."""
        if not self.is_running:
            self._task = asyncio.create_task(self._poll())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
