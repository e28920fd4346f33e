"""Lookup entities: users, locations, manufacturers, categories, publishers.

These change rarely, so they are cached for longer than inventory lists.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter

from itam_sync.dto import (
    AssetCategory,
    CreateSoftwarePublisherRequest,
    Location,
    Manufacturer,
    SoftwarePublisher,
    User,
    UserQueryParams,
)
from itam_sync.entities import MutationKind, MutationRecord
from itam_sync.keys import (
    ASSET_CATEGORIES_KEY,
    LOCATIONS_KEY,
    MANUFACTURERS_KEY,
    SOFTWARE_PUBLISHERS_KEY,
    USERS_KEY,
    make_key,
)

from .base import ResourceService

_users = TypeAdapter(list[User])
_locations = TypeAdapter(list[Location])
_manufacturers = TypeAdapter(list[Manufacturer])
_categories = TypeAdapter(list[AssetCategory])
_publishers = TypeAdapter(list[SoftwarePublisher])


class LookupService(ResourceService):
    """Reference data used to populate filters and forms."""

    users_ttl: float = 10 * 60
    locations_ttl: float = 10 * 60
    manufacturers_ttl: float = 15 * 60
    categories_ttl: float = 15 * 60
    publishers_ttl: float = 30 * 60

    async def users(self, params: UserQueryParams | Mapping[str, Any] | None = None) -> list[User]:
        key = make_key(*USERS_KEY, params) if params else USERS_KEY

        async def load() -> list[User]:
            return _users.validate_python(await self._client.get("/users", params))

        return await self._query(key, load, ttl=self.users_ttl)

    async def locations(self) -> list[Location]:
        async def load() -> list[Location]:
            return _locations.validate_python(await self._client.get("/locations"))

        return await self._query(LOCATIONS_KEY, load, ttl=self.locations_ttl)

    async def manufacturers(self) -> list[Manufacturer]:
        async def load() -> list[Manufacturer]:
            return _manufacturers.validate_python(await self._client.get("/manufacturers"))

        return await self._query(MANUFACTURERS_KEY, load, ttl=self.manufacturers_ttl)

    async def asset_categories(self) -> list[AssetCategory]:
        async def load() -> list[AssetCategory]:
            return _categories.validate_python(await self._client.get("/asset-categories"))

        return await self._query(ASSET_CATEGORIES_KEY, load, ttl=self.categories_ttl)

    async def software_publishers(self) -> list[SoftwarePublisher]:
        async def load() -> list[SoftwarePublisher]:
            return _publishers.validate_python(await self._client.get("/software-publishers"))

        return await self._query(SOFTWARE_PUBLISHERS_KEY, load, ttl=self.publishers_ttl)

    async def create_software_publisher(
        self, request: CreateSoftwarePublisherRequest
    ) -> SoftwarePublisher:
        async def send() -> SoftwarePublisher:
            payload = await self._client.post("/software-publishers", request)
            return SoftwarePublisher.model_validate(payload)

        return await self._mutate(
            "software_publishers.create",
            send,
            lambda publisher: MutationRecord(
                kind=MutationKind.CREATE,
                resource=SOFTWARE_PUBLISHERS_KEY[0],
                entity_id=publisher.id,
                invalidate=(SOFTWARE_PUBLISHERS_KEY,),
            ),
        )
