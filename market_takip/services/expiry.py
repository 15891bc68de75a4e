"""Expiry date classification."""

import math
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Union

CRITICAL_DAYS = 3
WARNING_DAYS = 7

SECONDS_PER_DAY = 24 * 60 * 60


class ExpiryStatus(str, Enum):
    """Mutually exclusive expiry buckets."""

    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    OK = "ok"


def _as_naive_utc(now: Union[date, datetime]) -> datetime:
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc).replace(tzinfo=None)
        return now
    return datetime.combine(now, time.min)


def days_remaining(expiry_date: date, now: Union[date, datetime]) -> int:
    """
    Signed whole days until expiry, rounded up.

    ``ceil((expiry midnight - now) / 1 day)``; negative once the expiry day
    has fully passed. A plain date for ``now`` means midnight of that day.
    """
    midnight = datetime.combine(expiry_date, time.min)
    delta = midnight - _as_naive_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def classify(days: int) -> ExpiryStatus:
    """Map a day count to its status bucket."""
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days <= CRITICAL_DAYS:
        return ExpiryStatus.CRITICAL
    if days <= WARNING_DAYS:
        return ExpiryStatus.WARNING
    return ExpiryStatus.OK


def status_for(expiry_date: date, now: Union[date, datetime]) -> ExpiryStatus:
    return classify(days_remaining(expiry_date, now))
