"""
Tests for license compliance classification.
"""

from datetime import date, timedelta

from itam_sync.dto import SoftwareLicense
from itam_sync.entities import ComplianceStatus, classify_compliance

TODAY = date(2026, 10, 19)


def test_unknown_without_seat_data():
    assert classify_compliance(None, 3, None, today=TODAY) is ComplianceStatus.UNKNOWN


def test_expired_takes_precedence():
    status = classify_compliance(5, 9, TODAY - timedelta(days=1), today=TODAY)
    assert status is ComplianceStatus.EXPIRED


def test_over_deployed():
    assert classify_compliance(5, 6, None, today=TODAY) is ComplianceStatus.OVER_DEPLOYED


def test_expiring_soon_within_window():
    status = classify_compliance(10, 8, TODAY + timedelta(days=30), today=TODAY)
    assert status is ComplianceStatus.EXPIRING_SOON
    status = classify_compliance(10, 8, TODAY + timedelta(days=31), today=TODAY)
    assert status is ComplianceStatus.COMPLIANT


def test_under_utilized():
    assert classify_compliance(10, 4, None, today=TODAY) is ComplianceStatus.UNDER_UTILIZED
    assert classify_compliance(10, 5, None, today=TODAY) is ComplianceStatus.COMPLIANT


def _license(**overrides) -> SoftwareLicense:
    fields = {
        "id": 1,
        "software_name": "Visio",
        "software_publisher": "Microsoft",
        "license_type": "subscription",
        "license_model": "per_user",
        "total_seats": 10,
        "used_seats": 12,
        "available_seats": 0,
    }
    fields.update(overrides)
    return SoftwareLicense.model_validate(fields)


def test_license_derives_status_when_server_omits_it():
    assert _license().effective_compliance_status(TODAY) is ComplianceStatus.OVER_DEPLOYED


def test_license_prefers_server_status():
    license_ = _license(compliance_status="compliant")
    assert license_.effective_compliance_status(TODAY) is ComplianceStatus.COMPLIANT


def test_license_parses_datetime_expiration():
    license_ = _license(used_seats=6, expiration_date="2026-10-01T00:00:00.000Z")
    assert license_.effective_compliance_status(TODAY) is ComplianceStatus.EXPIRED
