from dataclasses import dataclass


@dataclass
class CacheMetrics:
    """Track hit/miss and fetch counts for a QueryCache."""

    total_reads: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    coalesced_reads: int = 0
    fetches: int = 0
    fetch_errors: int = 0
    total_fetch_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        if self.total_reads == 0:
            return 0.0
        return self.cache_hits / self.total_reads

    @property
    def avg_fetch_time_ms(self) -> float:
        """Calculate average loader duration."""
        if self.fetches == 0:
            return 0.0
        return self.total_fetch_time_ms / self.fetches

    def record_hit(self) -> None:
        """Record a read served from cache."""
        self.total_reads += 1
        self.cache_hits += 1

    def record_miss(self, coalesced: bool = False) -> None:
        """Record a read that had to wait for a fetch."""
        self.total_reads += 1
        self.cache_misses += 1
        if coalesced:
            self.coalesced_reads += 1

    def record_fetch(self, duration_ms: float, failed: bool = False) -> None:
        """Record a completed loader call (including its retries)."""
        self.fetches += 1
        self.total_fetch_time_ms += duration_ms
        if failed:
            self.fetch_errors += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_reads": self.total_reads,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "coalesced_reads": self.coalesced_reads,
            "hit_rate": self.hit_rate,
            "fetches": self.fetches,
            "fetch_errors": self.fetch_errors,
            "avg_fetch_time_ms": self.avg_fetch_time_ms,
        }
