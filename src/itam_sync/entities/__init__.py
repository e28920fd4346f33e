"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by the cache and
services. They are NOT used for API contracts - use the pydantic models
from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .cache_entry import CacheEntryEntity, CacheEvent, CacheEventKind
from .compliance import ComplianceStatus, classify_compliance
from .mutation import MutationKind, MutationRecord

__all__ = [
    "CacheEntryEntity",
    "CacheEvent",
    "CacheEventKind",
    "ComplianceStatus",
    "classify_compliance",
    "MutationKind",
    "MutationRecord",
]
