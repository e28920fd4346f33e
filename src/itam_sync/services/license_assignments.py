"""License assignment service."""

from typing import Any

from pydantic import TypeAdapter

from itam_sync.cache import QueryCache
from itam_sync.dto import CreateLicenseAssignmentRequest, LicenseAssignment
from itam_sync.entities import MutationKind, MutationRecord
from itam_sync.errors import LicenseSeatsExhaustedError
from itam_sync.keys import license_assignment_keys, software_license_keys
from itam_sync.log import get_logger
from itam_sync.protocols import RequestClient
from itam_sync.retry import RetryPolicy, run_with_retry

from .base import ResourceService, apply_mutation, is_valid_id
from .software_licenses import SoftwareLicenseService

logger = get_logger(__name__)

_assignment_list = TypeAdapter(list[LicenseAssignment])


class LicenseAssignmentService(ResourceService):
    """Seat assignments of software licenses to users and devices.

    Assignments for one license are cached under the license's own key
    space (``("software-licenses", "assignments", id)``), so invalidating the
    license prefix also refreshes them. Per-user and per-device views live
    under ``("license-assignments", ...)``.
    """

    PATH = "/license-assignments"
    keys = license_assignment_keys
    license_keys = software_license_keys

    ttl: float = 2 * 60

    def __init__(
        self,
        client: RequestClient,
        cache: QueryCache,
        licenses: SoftwareLicenseService,
        query_retry: RetryPolicy | None = None,
        mutation_retry: RetryPolicy | None = None,
    ) -> None:
        super().__init__(client, cache, query_retry=query_retry, mutation_retry=mutation_retry)
        self._licenses = licenses

    async def _load(self, params: dict[str, Any]) -> list[LicenseAssignment]:
        return _assignment_list.validate_python(await self._client.get(self.PATH, params))

    async def for_license(self, license_id: int | None) -> list[LicenseAssignment] | None:
        if not is_valid_id(license_id):
            return None
        return await self._query(
            self.license_keys.assignments(license_id),
            lambda: self._load({"softwareLicenseId": license_id}),
            ttl=self.ttl,
        )

    async def for_user(self, user_id: int | None) -> list[LicenseAssignment] | None:
        if not is_valid_id(user_id):
            return None
        return await self._query(
            self.keys.op("by-user", user_id),
            lambda: self._load({"assignedToUserId": user_id}),
            ttl=self.ttl,
        )

    async def for_device(self, device_id: int | None) -> list[LicenseAssignment] | None:
        if not is_valid_id(device_id):
            return None
        return await self._query(
            self.keys.op("by-device", device_id),
            lambda: self._load({"assignedToDeviceId": device_id}),
            ttl=self.ttl,
        )

    async def create(self, request: CreateLicenseAssignmentRequest) -> LicenseAssignment:
        """Assign a seat.

        Raises:
            LicenseSeatsExhaustedError: The license has no available seats;
                nothing is sent and the cache is unchanged.
            ApiClientError: The server rejected or failed the request.
        """
        license_id = request.software_license_id
        license_ = await self._licenses.get(license_id)
        if license_ is not None and license_.available_seats <= 0:
            raise LicenseSeatsExhaustedError(license_id)

        async def send() -> LicenseAssignment:
            return LicenseAssignment.model_validate(await self._client.post(self.PATH, request))

        return await self._mutate(
            "license_assignments.create",
            send,
            lambda assignment: MutationRecord(
                kind=MutationKind.CREATE,
                resource=self.keys.resource,
                entity_id=assignment.id,
                invalidate=(
                    self.license_keys.assignments(assignment.software_license_id),
                    self.license_keys.detail(assignment.software_license_id),
                    self.license_keys.lists(),
                    self.license_keys.compliance(),
                    self.keys.all,
                ),
            ),
        )

    async def delete(self, assignment_id: int, license_id: int | None = None) -> None:
        """Unassign a seat.

        With ``license_id`` the assignment is removed from that license's
        cached assignment list before the request is sent, and the previous
        entry is restored if the request fails.
        """
        key = self.license_keys.assignments(license_id) if is_valid_id(license_id) else None
        snapshot = self._cache.get_entry(key) if key is not None else None
        optimistic = snapshot is not None and snapshot.value is not None
        if optimistic:
            self._cache.write(key, [a for a in snapshot.value if a.id != assignment_id])

        try:
            await run_with_retry(
                lambda: self._client.delete(f"{self.PATH}/{assignment_id}"),
                self._mutation_retry,
                name="license_assignments.delete",
            )
        except Exception:
            if optimistic:
                self._cache.restore(key, snapshot)
                logger.info("optimistic_update_reverted", key=key, assignment_id=assignment_id)
            raise

        apply_mutation(
            self._cache,
            MutationRecord(
                kind=MutationKind.DELETE,
                resource=self.keys.resource,
                entity_id=assignment_id,
                invalidate=(self.license_keys.all, self.keys.all),
            ),
        )
