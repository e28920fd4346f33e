"""Mutation record domain entity."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from itam_sync.keys import CacheKey


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class MutationRecord:
    """Cache effects of a completed write against one entity.

    Built from the server's success response and applied to the cache in
    one step; a failed write never produces a record.

    Attributes:
        kind: The write operation
        resource: Resource name, e.g. "hardware-assets"
        entity_id: Id of the affected entity, if known
        invalidate: Keys or prefixes to mark stale
        write: Keys to seed with a value from the response
        evict: Keys or prefixes to remove outright
    """

    kind: MutationKind
    resource: str
    entity_id: int | None = None
    invalidate: tuple[CacheKey, ...] = ()
    write: tuple[tuple[CacheKey, Any], ...] = field(default=())
    evict: tuple[CacheKey, ...] = ()
