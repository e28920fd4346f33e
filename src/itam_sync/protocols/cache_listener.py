"""Cache listener protocol."""

from typing import Protocol

from itam_sync.entities import CacheEvent


class CacheListener(Protocol):
    """Callable notified when a subscribed cache key changes.

    Listeners run synchronously inside the cache operation that caused the
    change and must not block.
    """

    def __call__(self, event: CacheEvent) -> None: ...
