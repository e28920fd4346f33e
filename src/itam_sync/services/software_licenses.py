"""Software license service."""

from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter

from itam_sync.dto import (
    ComplianceSummary,
    CreateSoftwareLicenseRequest,
    Page,
    SoftwareLicense,
    SoftwareLicenseQueryParams,
    UpdateSoftwareLicenseRequest,
)
from itam_sync.entities import MutationKind, MutationRecord
from itam_sync.keys import CacheKey, software_license_keys

from .base import ResourceService, is_valid_id

_license_list = TypeAdapter(list[SoftwareLicense])


class SoftwareLicenseService(ResourceService):
    """Reads and writes software licenses through the session cache.

    Every write also invalidates the derived aggregates (compliance summary
    and expiring-license lists), since seat counts and dates feed them.
    """

    PATH = "/software-licenses"
    keys = software_license_keys

    list_ttl: float = 5 * 60
    detail_ttl: float = 5 * 60
    compliance_ttl: float = 2 * 60
    expiring_ttl: float = 5 * 60

    def _aggregate_keys(self) -> tuple[CacheKey, ...]:
        return (self.keys.lists(), self.keys.compliance(), self.keys.expiring_all())

    async def get_all(
        self, params: SoftwareLicenseQueryParams | Mapping[str, Any] | None = None
    ) -> Page[SoftwareLicense]:
        async def load() -> Page[SoftwareLicense]:
            payload = await self._client.get(self.PATH, params)
            return Page[SoftwareLicense].model_validate(payload)

        return await self._query(self.keys.list(params), load, ttl=self.list_ttl)

    async def get(self, license_id: int | None) -> SoftwareLicense | None:
        """Single license by id; returns None without a request for a missing id."""
        if not is_valid_id(license_id):
            return None

        async def load() -> SoftwareLicense:
            payload = await self._client.get(f"{self.PATH}/{license_id}")
            return SoftwareLicense.model_validate(payload)

        return await self._query(self.keys.detail(license_id), load, ttl=self.detail_ttl)

    async def compliance_summary(self) -> ComplianceSummary:
        async def load() -> ComplianceSummary:
            payload = await self._client.get(f"{self.PATH}/compliance-summary")
            return ComplianceSummary.model_validate(payload)

        return await self._query(self.keys.compliance(), load, ttl=self.compliance_ttl)

    async def expiring(self, days: int = 30) -> list[SoftwareLicense]:
        """Licenses expiring within ``days`` days."""

        async def load() -> list[SoftwareLicense]:
            payload = await self._client.get(f"{self.PATH}/expiring", {"days": days})
            return _license_list.validate_python(payload)

        return await self._query(self.keys.expiring(days), load, ttl=self.expiring_ttl)

    async def create(self, request: CreateSoftwareLicenseRequest) -> SoftwareLicense:
        async def send() -> SoftwareLicense:
            return SoftwareLicense.model_validate(await self._client.post(self.PATH, request))

        return await self._mutate(
            "software_licenses.create",
            send,
            lambda license_: MutationRecord(
                kind=MutationKind.CREATE,
                resource=self.keys.resource,
                entity_id=license_.id,
                invalidate=self._aggregate_keys(),
                write=((self.keys.detail(license_.id), license_),),
            ),
        )

    async def update(
        self, license_id: int, request: UpdateSoftwareLicenseRequest
    ) -> SoftwareLicense:
        async def send() -> SoftwareLicense:
            payload = await self._client.put(f"{self.PATH}/{license_id}", request)
            return SoftwareLicense.model_validate(payload)

        return await self._mutate(
            "software_licenses.update",
            send,
            lambda license_: MutationRecord(
                kind=MutationKind.UPDATE,
                resource=self.keys.resource,
                entity_id=license_.id,
                invalidate=self._aggregate_keys(),
                write=((self.keys.detail(license_.id), license_),),
            ),
        )

    async def delete(self, license_id: int) -> None:
        async def send() -> Any:
            return await self._client.delete(f"{self.PATH}/{license_id}")

        await self._mutate(
            "software_licenses.delete",
            send,
            lambda _: MutationRecord(
                kind=MutationKind.DELETE,
                resource=self.keys.resource,
                entity_id=license_id,
                invalidate=self._aggregate_keys(),
                evict=(self.keys.detail(license_id), self.keys.assignments(license_id)),
            ),
        )
