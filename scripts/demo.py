#!/usr/bin/env python3
"""
Demo script for itam-sync.

This script walks through cached reads, request coalescing and
mutation-driven invalidation against a running inventory API
(API_BASE_URL, default http://localhost:8787).
"""

import asyncio
import time

from itam_sync import InventorySession, configure_logging, settings
from itam_sync.errors import ApiClientError


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_health(session: InventorySession) -> None:
    """Check the server before anything else."""
    print_section("Health Check")

    status = await session.health.check()
    print(f"\n  Status: {status.status}")
    print(f"  Version: {status.version}")


async def demo_cached_reads(session: InventorySession) -> None:
    """Demonstrate cache hits within the freshness window."""
    print_section("Cached Reads")

    params = {"page": 1, "limit": 25, "status": "deployed"}

    for attempt in ("cold", "warm"):
        start = time.perf_counter()
        page = await session.hardware_assets.get_all(params)
        duration = (time.perf_counter() - start) * 1000
        print(f"\n  {attempt:<5} read: {len(page.data)} assets in {duration:.2f}ms")

    print(f"\n  Key order does not matter: {sorted(params)} -> same entry")
    await session.hardware_assets.get_all(dict(reversed(params.items())))


async def demo_coalescing(session: InventorySession) -> None:
    """Demonstrate concurrent readers sharing one request."""
    print_section("Request Coalescing")

    session.cache.invalidate(("software-licenses",))
    before = session.cache.metrics.fetches
    results = await asyncio.gather(*(session.software_licenses.get_all() for _ in range(5)))
    fetches = session.cache.metrics.fetches - before

    print(f"\n  5 concurrent readers, {fetches} fetch")
    print(f"  Same object for every reader: {all(r is results[0] for r in results)}")


async def demo_compliance(session: InventorySession) -> None:
    """Show compliance status of every license on the first page."""
    print_section("License Compliance")

    summary = await session.software_licenses.compliance_summary()
    print(f"\n  Total: {summary.total_licenses}, over-deployed: {summary.over_deployed}")

    page = await session.software_licenses.get_all({"page": 1, "limit": 10})
    print(f"\n{'License':<40} {'Seats':<12} {'Status':<16}")
    print("-" * 70)
    for license_ in page.data:
        seats = f"{license_.used_seats}/{license_.total_seats}"
        status = license_.effective_compliance_status().value
        print(f"{license_.software_name[:38]:<40} {seats:<12} {status:<16}")


def print_stats(session: InventorySession) -> None:
    print_section("Cache Statistics")

    for name, value in session.cache.stats().items():
        print(f"  {name:<20} {value}")


async def main() -> None:
    """Run all demos."""
    configure_logging()

    print("\n🚀 itam-sync Demo")
    print("=" * 70)
    print(f"API: {settings.api_url}")

    try:
        async with InventorySession.create() as session:
            await demo_health(session)
            await demo_cached_reads(session)
            await demo_coalescing(session)
            await demo_compliance(session)
            print_stats(session)

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except ApiClientError as e:
        print(f"\n❌ Error: {e.message} (status={e.status}, code={e.code})")
        print("\nMake sure the inventory API is running, or set API_BASE_URL")
        print("to your server.")


if __name__ == "__main__":
    asyncio.run(main())
