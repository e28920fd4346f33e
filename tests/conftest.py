"""
Shared fixtures: a fake clock and an in-process inventory API.

The API below is a minimal stand-in for the real server so services can be
exercised end to end over HTTP (httpx.ASGITransport); it only implements
the parts of the REST contract the tests touch.
"""

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from itam_sync import ApiClient, InventorySession, QueryCache, RetryPolicy

BASE_URL = "http://inventory.test"

FAST_RETRY = RetryPolicy(max_attempts=3, base_delay=0.0)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse({"error": {"code": code, "message": message}}, status_code=status)


def _page(items: list[dict], page: int, limit: int) -> dict:
    start = (page - 1) * limit
    return {
        "data": items[start : start + limit],
        "pagination": {
            "currentPage": page,
            "totalPages": max(1, -(-len(items) // limit)),
            "totalItems": len(items),
            "itemsPerPage": limit,
        },
    }


def seed_data() -> dict:
    return {
        "hardware-assets": {
            1: {
                "id": 1,
                "serial_number": "SN-0001",
                "asset_tag": "IT-0001",
                "status": "deployed",
                "model_name": "Latitude 7440",
                "manufacturer_name": "Dell",
                "category_name": "Laptop",
            },
            2: {
                "id": 2,
                "serial_number": "SN-0002",
                "asset_tag": "IT-0002",
                "status": "in_stock",
                "model_name": "ThinkPad T14",
                "manufacturer_name": "Lenovo",
                "category_name": "Laptop",
            },
        },
        "software-licenses": {
            1: {
                "id": 1,
                "software_name": "Microsoft 365",
                "software_publisher": "Microsoft",
                "license_type": "subscription",
                "license_model": "per_user",
                "total_seats": 10,
                "used_seats": 1,
                "available_seats": 9,
                "expiration_date": "2099-12-31",
            },
            2: {
                "id": 2,
                "software_name": "Adobe Acrobat Pro",
                "software_publisher": "Adobe",
                "license_type": "subscription",
                "license_model": "named_user",
                "total_seats": 2,
                "used_seats": 2,
                "available_seats": 0,
            },
        },
        "license-assignments": {
            1: {
                "id": 1,
                "software_license_id": 1,
                "assigned_to_user_id": 7,
                "assignment_type": "user",
                "user_name": "Ada Lovelace",
            },
        },
        "software-publishers": {
            1: {"id": 1, "name": "Microsoft", "website": "https://microsoft.com"},
        },
    }


def build_inventory_app() -> FastAPI:
    """Create the stand-in inventory API with fresh data."""
    app = FastAPI()
    app.state.data = seed_data()
    app.state.calls = []
    app.state.failures = []

    def table(name: str) -> dict:
        return app.state.data[name]

    @app.middleware("http")
    async def record_and_inject(request: Request, call_next):
        app.state.calls.append((request.method, request.url.path))
        if app.state.failures:
            status = app.state.failures.pop(0)
            return _error(status, "INJECTED", f"Injected failure {status}")
        return await call_next(request)

    @app.get("/health")
    async def health():
        return {"status": "ok", "timestamp": _now(), "version": "1.4.2"}

    # Hardware assets

    @app.get("/api/v1/hardware-assets")
    async def list_assets(page: int = 1, limit: int = 20, status: str | None = None):
        items = list(table("hardware-assets").values())
        if status:
            items = [a for a in items if a["status"] == status]
        return _page(items, page, limit)

    @app.get("/api/v1/hardware-assets/{asset_id}")
    async def get_asset(asset_id: int):
        asset = table("hardware-assets").get(asset_id)
        if asset is None:
            return _error(404, "NOT_FOUND", f"Hardware asset {asset_id} not found")
        return asset

    @app.post("/api/v1/hardware-assets")
    async def create_asset(request: Request):
        body = await request.json()
        assets = table("hardware-assets")
        asset_id = max(assets, default=0) + 1
        assets[asset_id] = {
            "id": asset_id,
            "serial_number": body["serialNumber"],
            "asset_tag": body.get("assetTag"),
            "status": body.get("initialStatus", "in_stock"),
            "model_name": body["model"],
            "manufacturer_name": body["make"],
            "category_name": body["assetType"],
            "created_at": _now(),
        }
        return JSONResponse(assets[asset_id], status_code=201)

    @app.put("/api/v1/hardware-assets/{asset_id}")
    async def update_asset(asset_id: int, request: Request):
        assets = table("hardware-assets")
        if asset_id not in assets:
            return _error(404, "NOT_FOUND", f"Hardware asset {asset_id} not found")
        body = await request.json()
        updated = dict(assets[asset_id])
        if "status" in body:
            updated["status"] = body["status"]
        if "notes" in body:
            updated["notes"] = body["notes"]
        if "assetTag" in body:
            updated["asset_tag"] = body["assetTag"]
        updated["updated_at"] = _now()
        assets[asset_id] = updated
        return updated

    @app.delete("/api/v1/hardware-assets/{asset_id}")
    async def delete_asset(asset_id: int):
        if table("hardware-assets").pop(asset_id, None) is None:
            return _error(404, "NOT_FOUND", f"Hardware asset {asset_id} not found")
        return Response(status_code=204)

    # Software licenses

    @app.get("/api/v1/software-licenses")
    async def list_licenses(page: int = 1, limit: int = 20, search: str | None = None):
        items = list(table("software-licenses").values())
        if search:
            items = [item for item in items if search.lower() in item["software_name"].lower()]
        return _page(items, page, limit)

    @app.get("/api/v1/software-licenses/compliance-summary")
    async def compliance_summary():
        licenses = list(table("software-licenses").values())
        over = sum(1 for item in licenses if item["used_seats"] > item["total_seats"])
        return {
            "total_licenses": len(licenses),
            "compliant": len(licenses) - over,
            "over_deployed": over,
            "expiring_soon": 0,
            "expired": 0,
        }

    @app.get("/api/v1/software-licenses/expiring")
    async def expiring(days: int = 30):
        return []

    @app.get("/api/v1/software-licenses/{license_id}")
    async def get_license(license_id: int):
        license_ = table("software-licenses").get(license_id)
        if license_ is None:
            return _error(404, "NOT_FOUND", f"License with ID {license_id} not found")
        return license_

    @app.post("/api/v1/software-licenses")
    async def create_license(request: Request):
        body = await request.json()
        licenses = table("software-licenses")
        license_id = max(licenses, default=0) + 1
        licenses[license_id] = {
            "id": license_id,
            "software_name": body["softwareName"],
            "software_publisher": body["softwarePublisher"],
            "license_type": body["licenseType"],
            "license_model": body["licenseModel"],
            "total_seats": body["totalSeats"],
            "used_seats": 0,
            "available_seats": body["totalSeats"],
            "expiration_date": body.get("expirationDate"),
            "compliance_status": "compliant",
        }
        return JSONResponse(licenses[license_id], status_code=201)

    @app.put("/api/v1/software-licenses/{license_id}")
    async def update_license(license_id: int, request: Request):
        licenses = table("software-licenses")
        if license_id not in licenses:
            return _error(404, "NOT_FOUND", f"License with ID {license_id} not found")
        body = await request.json()
        updated = dict(licenses[license_id])
        if "softwareName" in body:
            updated["software_name"] = body["softwareName"]
        if "totalSeats" in body:
            updated["total_seats"] = body["totalSeats"]
            updated["available_seats"] = body["totalSeats"] - updated["used_seats"]
        licenses[license_id] = updated
        return updated

    @app.delete("/api/v1/software-licenses/{license_id}")
    async def delete_license(license_id: int):
        if table("software-licenses").pop(license_id, None) is None:
            return _error(404, "NOT_FOUND", f"License with ID {license_id} not found")
        return Response(status_code=204)

    # License assignments

    @app.get("/api/v1/license-assignments")
    async def list_assignments(
        softwareLicenseId: int | None = None,
        assignedToUserId: int | None = None,
        assignedToDeviceId: int | None = None,
    ):
        items = list(table("license-assignments").values())
        if softwareLicenseId is not None:
            items = [a for a in items if a["software_license_id"] == softwareLicenseId]
        if assignedToUserId is not None:
            items = [a for a in items if a.get("assigned_to_user_id") == assignedToUserId]
        if assignedToDeviceId is not None:
            items = [a for a in items if a.get("assigned_to_device_id") == assignedToDeviceId]
        return items

    @app.post("/api/v1/license-assignments")
    async def create_assignment(request: Request):
        body = await request.json()
        license_ = table("software-licenses").get(body["softwareLicenseId"])
        if license_ is None:
            return _error(404, "NOT_FOUND", "License not found")
        if license_["available_seats"] <= 0:
            return _error(409, "NO_AVAILABLE_SEATS", "No seats available")
        assignments = table("license-assignments")
        assignment_id = max(assignments, default=0) + 1
        assignments[assignment_id] = {
            "id": assignment_id,
            "software_license_id": license_["id"],
            "assigned_to_user_id": body.get("assignedToUserId"),
            "assigned_to_device_id": body.get("assignedToDeviceId"),
            "assignment_type": body["assignmentType"],
            "assignment_date": _now(),
        }
        license_["used_seats"] += 1
        license_["available_seats"] -= 1
        return JSONResponse(assignments[assignment_id], status_code=201)

    @app.delete("/api/v1/license-assignments/{assignment_id}")
    async def delete_assignment(assignment_id: int):
        assignment = table("license-assignments").pop(assignment_id, None)
        if assignment is None:
            return _error(404, "NOT_FOUND", f"Assignment with ID {assignment_id} not found")
        license_ = table("software-licenses").get(assignment["software_license_id"])
        if license_ is not None:
            license_["used_seats"] -= 1
            license_["available_seats"] += 1
        return Response(status_code=204)

    # Lookups

    @app.get("/api/v1/users")
    async def users():
        return [{"id": 7, "full_name": "Ada Lovelace", "email": "ada@example.com"}]

    @app.get("/api/v1/locations")
    async def locations():
        return [{"id": 1, "name": "HQ", "city": "London"}]

    @app.get("/api/v1/manufacturers")
    async def manufacturers():
        return [{"id": 1, "name": "Dell"}, {"id": 2, "name": "Lenovo"}]

    @app.get("/api/v1/asset-categories")
    async def asset_categories():
        return [{"id": 1, "name": "Laptop"}]

    @app.get("/api/v1/software-publishers")
    async def software_publishers():
        return list(table("software-publishers").values())

    @app.post("/api/v1/software-publishers")
    async def create_publisher(request: Request):
        body = await request.json()
        publishers = table("software-publishers")
        publisher_id = max(publishers, default=0) + 1
        publishers[publisher_id] = {"id": publisher_id, **body}
        return JSONResponse(publishers[publisher_id], status_code=201)

    return app


def count_calls(app: FastAPI, method: str, path: str) -> int:
    """Number of requests the stand-in API received for method and path."""
    return sum(1 for call in app.state.calls if call == (method, path))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def inventory_app():
    return build_inventory_app()


@pytest_asyncio.fixture
async def session(inventory_app, clock):
    """Session wired to the in-process API with zero-delay retries."""
    client = ApiClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=inventory_app))
    cache = QueryCache(stale_time=300, gc_time=600, clock=clock)
    session = InventorySession(
        client=client,
        cache=cache,
        query_retry=FAST_RETRY,
        mutation_retry=FAST_RETRY,
        health_retry=RetryPolicy(max_attempts=2, base_delay=0.0),
    )
    yield session
    await session.close()
