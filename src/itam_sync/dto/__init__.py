"""Data Transfer Objects for the inventory REST API.

These Pydantic models define the wire contract: response records as the
server returns them (snake_case) and request bodies / query parameters as
the server expects them (camelCase aliases).

Internal cache bookkeeping should use entities from the entities package.
"""

from .enums import AssetStatus, LicenseAssignmentType, LicenseModel, LicenseType, SortOrder
from .requests import (
    CreateHardwareAssetRequest,
    CreateLicenseAssignmentRequest,
    CreateSoftwareLicenseRequest,
    CreateSoftwarePublisherRequest,
    HardwareAssetQueryParams,
    SoftwareLicenseQueryParams,
    UpdateHardwareAssetRequest,
    UpdateSoftwareLicenseRequest,
    UserQueryParams,
)
from .responses import (
    ApiErrorBody,
    AssetAssignment,
    AssetCategory,
    ComplianceSummary,
    HardwareAsset,
    HealthStatus,
    LicenseAssignment,
    Location,
    Manufacturer,
    Page,
    PaginationInfo,
    SoftwareLicense,
    SoftwarePublisher,
    User,
)

__all__ = [
    # Enums
    "AssetStatus",
    "LicenseType",
    "LicenseModel",
    "LicenseAssignmentType",
    "SortOrder",
    # Requests
    "CreateHardwareAssetRequest",
    "UpdateHardwareAssetRequest",
    "CreateSoftwareLicenseRequest",
    "UpdateSoftwareLicenseRequest",
    "CreateLicenseAssignmentRequest",
    "CreateSoftwarePublisherRequest",
    "HardwareAssetQueryParams",
    "SoftwareLicenseQueryParams",
    "UserQueryParams",
    # Responses
    "ApiErrorBody",
    "AssetAssignment",
    "AssetCategory",
    "ComplianceSummary",
    "HardwareAsset",
    "HealthStatus",
    "LicenseAssignment",
    "Location",
    "Manufacturer",
    "Page",
    "PaginationInfo",
    "SoftwareLicense",
    "SoftwarePublisher",
    "User",
]
