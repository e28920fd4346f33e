"""Response DTOs: records returned by the API.

Records are frozen: the cache hands out shared copies and replaces them
wholesale, never in place. Unknown fields from the server are kept.
"""

from datetime import date
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from itam_sync.entities import ComplianceStatus, classify_compliance

from .enums import AssetStatus, LicenseAssignmentType, LicenseModel, LicenseType

T = TypeVar("T")


class ApiRecord(BaseModel):
    """Base for records returned by the API."""

    model_config = ConfigDict(frozen=True, extra="allow", protected_namespaces=())


def parse_date(value: str | None) -> date | None:
    """Parse the date part of an ISO date or datetime string."""
    if not value:
        return None
    return date.fromisoformat(value[:10])


class PaginationInfo(BaseModel):
    """Pagination block of a list response (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class Page(BaseModel, Generic[T]):
    """Paginated list response: ``{"data": [...], "pagination": {...}}``."""

    model_config = ConfigDict(frozen=True)

    data: list[T] = Field(default_factory=list)
    pagination: PaginationInfo | None = None


class AssetAssignment(ApiRecord):
    id: int
    hardware_asset_id: int
    assigned_to_user_id: int | None = None
    location_id: int | None = None
    assignment_date: str | None = None
    unassignment_date: str | None = None
    assigned_user_name: str | None = None
    assigned_user_email: str | None = None
    location_name: str | None = None
    assignment_type: str | None = None


class HardwareAsset(ApiRecord):
    """A tracked piece of hardware, joined with its model and vendor data."""

    id: int
    serial_number: str
    status: AssetStatus
    asset_tag: str | None = None
    purchase_date: str | None = None
    purchase_cost: float | None = None
    warranty_expiration_date: str | None = None
    notes: str | None = None
    mac_addresses: str | None = None
    po_number: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    model_name: str | None = None
    model_number: str | None = None
    manufacturer_name: str | None = None
    category_name: str | None = None
    vendor_name: str | None = None
    vendor_contact: str | None = None
    vendor_email: str | None = None
    specifications: str | None = None

    current_assignment: AssetAssignment | None = None
    assignments: list[AssetAssignment] | None = None


class LicenseAssignment(ApiRecord):
    id: int
    software_license_id: int
    assignment_type: LicenseAssignmentType
    assigned_to_user_id: int | None = None
    assigned_to_device_id: int | None = None
    assignment_date: str | None = None
    unassignment_date: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    device_name: str | None = None
    device_serial: str | None = None


class SoftwareLicense(ApiRecord):
    """A software entitlement with its seat usage."""

    id: int
    software_name: str
    software_publisher: str
    license_type: LicenseType
    license_model: LicenseModel
    total_seats: int
    used_seats: int = 0
    available_seats: int = 0
    software_version: str | None = None
    license_key: str | None = None
    cost_per_seat: float | None = None
    total_cost: float | None = None
    purchase_date: str | None = None
    expiration_date: str | None = None
    maintenance_expiration_date: str | None = None
    purchase_order_number: str | None = None
    vendor_name: str | None = None
    vendor_contact: str | None = None
    notes: str | None = None
    is_active: bool = True
    created_at: str | None = None
    updated_at: str | None = None

    assignments: list[LicenseAssignment] | None = None
    compliance_status: ComplianceStatus | None = None

    @property
    def has_available_seats(self) -> bool:
        return self.available_seats > 0

    def effective_compliance_status(self, today: date | None = None) -> ComplianceStatus:
        """Server-reported status if present, otherwise derived locally."""
        if self.compliance_status is not None:
            return self.compliance_status
        return classify_compliance(
            total_seats=self.total_seats,
            used_seats=self.used_seats,
            expiration_date=parse_date(self.expiration_date),
            today=today,
        )


class User(ApiRecord):
    id: int
    full_name: str
    email: str
    employee_id: str | None = None
    department_id: int | None = None
    is_active: bool = True
    created_at: str | None = None
    updated_at: str | None = None


class Location(ApiRecord):
    id: int
    name: str
    address_line1: str | None = None
    city: str | None = None
    state_province: str | None = None
    country: str | None = None


class Manufacturer(ApiRecord):
    id: int
    name: str


class AssetCategory(ApiRecord):
    id: int
    name: str


class SoftwarePublisher(ApiRecord):
    id: int
    name: str
    website: str | None = None
    support_contact: str | None = None


class ComplianceSummary(ApiRecord):
    """Aggregate license compliance counts."""

    total_licenses: int = 0
    compliant: int = 0
    over_deployed: int = 0
    expiring_soon: int = 0
    expired: int = 0


class HealthStatus(ApiRecord):
    """Payload of the liveness endpoint."""

    status: str
    timestamp: str | None = None
    version: str | None = None

    @property
    def is_healthy(self) -> bool:
        return self.status.lower() in ("ok", "healthy")


class ApiErrorDetail(BaseModel):
    code: str | None = None
    message: str | None = None
    details: str | list[str] | None = None


class ApiErrorBody(BaseModel):
    """Error envelope: ``{"error": {"code", "message", "details"}}``."""

    error: ApiErrorDetail
