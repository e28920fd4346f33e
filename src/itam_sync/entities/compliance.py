"""License compliance classification."""

from datetime import date, timedelta
from enum import Enum

EXPIRING_SOON_DAYS = 30
UNDER_UTILIZED_RATIO = 0.5


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    OVER_DEPLOYED = "over_deployed"
    UNDER_UTILIZED = "under_utilized"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    UNKNOWN = "unknown"


def classify_compliance(
    total_seats: int | None,
    used_seats: int | None,
    expiration_date: date | None,
    today: date | None = None,
    expiring_within_days: int = EXPIRING_SOON_DAYS,
) -> ComplianceStatus:
    """Derive a license's compliance status from seat usage and expiration.

    Precedence: expired, over-deployed, expiring soon, under-utilized,
    compliant. Without seat data the status is unknown.

    Args:
        total_seats: Entitled seats
        used_seats: Seats currently assigned
        expiration_date: License end date, None for perpetual licenses
        today: Reference date, defaults to date.today()
        expiring_within_days: Window for the expiring-soon classification

    Returns:
        The derived ComplianceStatus
    """
    if total_seats is None or used_seats is None:
        return ComplianceStatus.UNKNOWN

    today = today or date.today()

    if expiration_date is not None and expiration_date < today:
        return ComplianceStatus.EXPIRED

    if used_seats > total_seats:
        return ComplianceStatus.OVER_DEPLOYED

    if expiration_date is not None and expiration_date <= today + timedelta(
        days=expiring_within_days
    ):
        return ComplianceStatus.EXPIRING_SOON

    if total_seats > 0 and used_seats / total_seats < UNDER_UTILIZED_RATIO:
        return ComplianceStatus.UNDER_UTILIZED

    return ComplianceStatus.COMPLIANT
