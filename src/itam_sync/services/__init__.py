"""Service layer: one service per API resource.

Services are thin declarative bindings between cache keys and API calls.
They depend on the RequestClient protocol and a session QueryCache, not on
concrete transports.

Architecture:
    Service -> QueryCache -> Repository
    (Hooks) -> (Caching)  -> (HTTP)

Usage:
    ```python
    from itam_sync.services import HardwareAssetService

    assets = HardwareAssetService(client=client, cache=cache)
    page = await assets.get_all({"page": 1, "limit": 25, "status": "deployed"})
    ```
"""

from .base import ResourceService, apply_mutation, is_valid_id
from .hardware_assets import HardwareAssetService
from .health import HealthMonitor
from .license_assignments import LicenseAssignmentService
from .lookups import LookupService
from .software_licenses import SoftwareLicenseService

__all__ = [
    "ResourceService",
    "apply_mutation",
    "is_valid_id",
    "HardwareAssetService",
    "SoftwareLicenseService",
    "LicenseAssignmentService",
    "LookupService",
    "HealthMonitor",
]
