"""Enumerations shared by request and response DTOs."""

from enum import Enum


class AssetStatus(str, Enum):
    IN_STOCK = "in_stock"
    DEPLOYED = "deployed"
    IN_REPAIR = "in_repair"
    RETIRED = "retired"
    DISPOSED = "disposed"


class LicenseType(str, Enum):
    PERPETUAL = "perpetual"
    SUBSCRIPTION = "subscription"
    VOLUME = "volume"
    OEM = "oem"
    TRIAL = "trial"
    EDUCATIONAL = "educational"
    ENTERPRISE_AGREEMENT = "enterprise_agreement"


class LicenseModel(str, Enum):
    PER_USER = "per_user"
    PER_DEVICE = "per_device"
    PER_CORE = "per_core"
    PER_PROCESSOR = "per_processor"
    CONCURRENT = "concurrent"
    NAMED_USER = "named_user"
    SITE_LICENSE = "site_license"
    ENTERPRISE = "enterprise"


class LicenseAssignmentType(str, Enum):
    USER = "user"
    DEVICE = "device"
    SHARED = "shared"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
