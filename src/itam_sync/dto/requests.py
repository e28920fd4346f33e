"""Request DTOs: bodies and query parameters sent to the API.

The server expects camelCase field names; models accept either the alias or
the Python name when constructed.
"""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import AssetStatus, LicenseAssignmentType, LicenseModel, LicenseType, SortOrder


class ApiRequest(BaseModel):
    """Base for outbound payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        protected_namespaces=(),
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize only the fields the caller set, by alias."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class QueryParams(ApiRequest):
    """Base for list query parameters; unset filters are never serialized."""

    page: int | None = Field(None, ge=1)
    limit: int | None = Field(None, ge=1, le=500)
    sort_order: SortOrder | None = None
    search: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class HardwareAssetQueryParams(QueryParams):
    status: AssetStatus | None = None
    asset_type: str | None = None
    sort_by: (
        Literal["created_at", "updated_at", "purchase_date", "status", "serial_number", "asset_tag"]
        | None
    ) = None


class SoftwareLicenseQueryParams(QueryParams):
    license_type: LicenseType | None = None
    license_model: LicenseModel | None = None
    compliance_status: str | None = None
    is_active: bool | None = None
    expiring_within_days: int | None = Field(None, ge=0)
    sort_by: (
        Literal["software_name", "expiration_date", "created_at", "total_seats", "used_seats"]
        | None
    ) = None


class UserQueryParams(QueryParams):
    is_active: bool | None = None
    department_id: int | None = None
    sort_by: Literal["full_name", "email", "created_at", "employee_id"] | None = None


class CreateHardwareAssetRequest(ApiRequest):
    """Request DTO for creating a hardware asset."""

    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1)
    asset_type: str = Field(..., min_length=1)
    asset_tag: str | None = None
    cpu: str | None = None
    ram: str | None = None
    storage: str | None = None
    mac_addresses: list[str] | None = None
    purchase_date: date | None = None
    purchase_cost: float | None = Field(None, ge=0)
    po_number: str | None = None
    vendor_id: int | None = None
    warranty_expiration_date: date | None = None
    initial_status: AssetStatus | None = None
    model_number: str | None = None
    notes: str | None = None


class UpdateHardwareAssetRequest(ApiRequest):
    """Partial update; only explicitly set fields are sent."""

    make: str | None = None
    model: str | None = None
    serial_number: str | None = None
    asset_type: str | None = None
    asset_tag: str | None = None
    cpu: str | None = None
    ram: str | None = None
    storage: str | None = None
    mac_addresses: list[str] | None = None
    purchase_date: date | None = None
    purchase_cost: float | None = Field(None, ge=0)
    po_number: str | None = None
    vendor_id: int | None = None
    warranty_expiration_date: date | None = None
    status: AssetStatus | None = None
    model_number: str | None = None
    notes: str | None = None


class CreateSoftwareLicenseRequest(ApiRequest):
    """Request DTO for creating a software license."""

    software_name: str = Field(..., min_length=1)
    software_publisher: str = Field(..., min_length=1)
    license_type: LicenseType
    license_model: LicenseModel
    total_seats: int = Field(..., ge=0)
    software_version: str | None = None
    license_key: str | None = None
    cost_per_seat: float | None = Field(None, ge=0)
    total_cost: float | None = Field(None, ge=0)
    purchase_date: date | None = None
    expiration_date: date | None = None
    maintenance_expiration_date: date | None = None
    purchase_order_number: str | None = None
    vendor_name: str | None = None
    vendor_contact: str | None = None
    notes: str | None = None
    is_active: bool | None = None


class UpdateSoftwareLicenseRequest(ApiRequest):
    """Partial update; only explicitly set fields are sent."""

    software_name: str | None = None
    software_publisher: str | None = None
    license_type: LicenseType | None = None
    license_model: LicenseModel | None = None
    total_seats: int | None = Field(None, ge=0)
    software_version: str | None = None
    license_key: str | None = None
    cost_per_seat: float | None = Field(None, ge=0)
    total_cost: float | None = Field(None, ge=0)
    purchase_date: date | None = None
    expiration_date: date | None = None
    maintenance_expiration_date: date | None = None
    purchase_order_number: str | None = None
    vendor_name: str | None = None
    vendor_contact: str | None = None
    notes: str | None = None
    is_active: bool | None = None


class CreateLicenseAssignmentRequest(ApiRequest):
    """Request DTO for assigning a license seat to a user or device."""

    software_license_id: int = Field(..., ge=1)
    assignment_type: LicenseAssignmentType
    assigned_to_user_id: int | None = None
    assigned_to_device_id: int | None = None


class CreateSoftwarePublisherRequest(BaseModel):
    """Publisher creation uses snake_case on the wire."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    website: str | None = None
    support_contact: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, mode="json")
