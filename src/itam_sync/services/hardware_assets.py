"""Hardware asset service."""

from collections.abc import Mapping
from typing import Any

from itam_sync.dto import (
    CreateHardwareAssetRequest,
    HardwareAsset,
    HardwareAssetQueryParams,
    Page,
    UpdateHardwareAssetRequest,
)
from itam_sync.entities import MutationKind, MutationRecord
from itam_sync.keys import hardware_asset_keys

from .base import ResourceService, is_valid_id


class HardwareAssetService(ResourceService):
    """Reads and writes hardware assets through the session cache.

    Cache effects of writes:
        - create: lists invalidated, new asset written to its detail key
        - update: updated asset written to its detail key, lists invalidated
        - delete: detail key evicted, lists invalidated
    """

    PATH = "/hardware-assets"
    keys = hardware_asset_keys

    list_ttl: float | None = None  # cache default
    detail_ttl: float | None = None

    async def get_all(
        self, params: HardwareAssetQueryParams | Mapping[str, Any] | None = None
    ) -> Page[HardwareAsset]:
        """Paginated, filtered list of assets."""

        async def load() -> Page[HardwareAsset]:
            payload = await self._client.get(self.PATH, params)
            return Page[HardwareAsset].model_validate(payload)

        return await self._query(self.keys.list(params), load, ttl=self.list_ttl)

    async def get(self, asset_id: int | None) -> HardwareAsset | None:
        """Single asset by id; returns None without a request for a missing id."""
        if not is_valid_id(asset_id):
            return None

        async def load() -> HardwareAsset:
            payload = await self._client.get(f"{self.PATH}/{asset_id}")
            return HardwareAsset.model_validate(payload)

        return await self._query(self.keys.detail(asset_id), load, ttl=self.detail_ttl)

    async def create(self, request: CreateHardwareAssetRequest) -> HardwareAsset:
        async def send() -> HardwareAsset:
            return HardwareAsset.model_validate(await self._client.post(self.PATH, request))

        return await self._mutate(
            "hardware_assets.create",
            send,
            lambda asset: MutationRecord(
                kind=MutationKind.CREATE,
                resource=self.keys.resource,
                entity_id=asset.id,
                invalidate=(self.keys.lists(),),
                write=((self.keys.detail(asset.id), asset),),
            ),
        )

    async def update(self, asset_id: int, request: UpdateHardwareAssetRequest) -> HardwareAsset:
        async def send() -> HardwareAsset:
            payload = await self._client.put(f"{self.PATH}/{asset_id}", request)
            return HardwareAsset.model_validate(payload)

        return await self._mutate(
            "hardware_assets.update",
            send,
            lambda asset: MutationRecord(
                kind=MutationKind.UPDATE,
                resource=self.keys.resource,
                entity_id=asset.id,
                invalidate=(self.keys.lists(),),
                write=((self.keys.detail(asset.id), asset),),
            ),
        )

    async def delete(self, asset_id: int) -> None:
        async def send() -> Any:
            return await self._client.delete(f"{self.PATH}/{asset_id}")

        await self._mutate(
            "hardware_assets.delete",
            send,
            lambda _: MutationRecord(
                kind=MutationKind.DELETE,
                resource=self.keys.resource,
                entity_id=asset_id,
                invalidate=(self.keys.lists(),),
                evict=(self.keys.detail(asset_id),),
            ),
        )
