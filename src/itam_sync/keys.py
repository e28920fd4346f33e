"""Cache key construction.

A cache key is a tuple ``(resource, operation, *qualifiers)``. Parameter
mappings are frozen into sorted tuples so that two value-equal parameter
sets produce the same key regardless of insertion order.
"""

from collections.abc import Hashable, Mapping
from typing import Any

from pydantic import BaseModel

CacheKey = tuple[Hashable, ...]


def freeze(value: Any) -> Hashable:
    """Convert a value into a hashable, order-independent form.

    Mappings become sorted ``(key, value)`` tuples with ``None`` values
    dropped (they are never sent on the wire), sequences become tuples,
    booleans are tagged so they never collide with 0 and 1, and pydantic
    models are frozen from their aliased dump.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, exclude_none=True, mode="json")
    if isinstance(value, Mapping):
        return tuple(
            sorted(
                ((str(k), freeze(v)) for k, v in value.items() if v is not None),
                key=lambda item: item[0],
            )
        )
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [freeze(v) for v in value]
        if isinstance(value, (set, frozenset)):
            items.sort(key=repr)
        return tuple(items)
    if isinstance(value, bool):
        # True == 1 but they serialize differently
        return ("__bool__", value)
    return value


def make_key(*parts: Any) -> CacheKey:
    """Build a cache key from its parts, freezing any parameter sets."""
    return tuple(freeze(part) for part in parts)


def matches_prefix(key: CacheKey, prefix: CacheKey) -> bool:
    """Return True if the leading elements of ``key`` equal ``prefix``."""
    return len(prefix) <= len(key) and key[: len(prefix)] == prefix


class QueryKeys:
    """Key factory for one REST resource.

    Example:
        ```python
        keys = QueryKeys("hardware-assets")
        keys.all                      # ("hardware-assets",)
        keys.lists()                  # ("hardware-assets", "list")
        keys.list({"page": 1})        # ("hardware-assets", "list", (("page", 1),))
        keys.detail(7)                # ("hardware-assets", "detail", 7)
        ```
    """

    def __init__(self, resource: str) -> None:
        self.resource = resource
        self.all: CacheKey = (resource,)

    def lists(self) -> CacheKey:
        return make_key(self.resource, "list")

    def list(self, params: Mapping[str, Any] | BaseModel | None = None) -> CacheKey:
        return make_key(self.resource, "list", params or {})

    def details(self) -> CacheKey:
        return make_key(self.resource, "detail")

    def detail(self, item_id: int) -> CacheKey:
        return make_key(self.resource, "detail", item_id)

    def op(self, operation: str, *qualifiers: Any) -> CacheKey:
        """Key for a resource specific operation (e.g. ``compliance``)."""
        return make_key(self.resource, operation, *qualifiers)


class SoftwareLicenseKeys(QueryKeys):
    """License keys, including the derived aggregates that writes invalidate."""

    def __init__(self) -> None:
        super().__init__("software-licenses")

    def compliance(self) -> CacheKey:
        return self.op("compliance")

    def expiring_all(self) -> CacheKey:
        return self.op("expiring")

    def expiring(self, days: int) -> CacheKey:
        return self.op("expiring", days)

    def assignments(self, license_id: int) -> CacheKey:
        return self.op("assignments", license_id)


hardware_asset_keys = QueryKeys("hardware-assets")
software_license_keys = SoftwareLicenseKeys()
license_assignment_keys = QueryKeys("license-assignments")

USERS_KEY: CacheKey = ("users",)
LOCATIONS_KEY: CacheKey = ("locations",)
MANUFACTURERS_KEY: CacheKey = ("manufacturers",)
ASSET_CATEGORIES_KEY: CacheKey = ("asset-categories",)
SOFTWARE_PUBLISHERS_KEY: CacheKey = ("software-publishers",)
HEALTH_KEY: CacheKey = ("health",)
