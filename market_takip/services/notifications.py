"""Expiry alerts for the notification centre."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from .expiry import ExpiryStatus, WARNING_DAYS, classify, days_remaining
from ..models.product import Product, utc_now


@dataclass(frozen=True)
class ExpiryAlert:
    """A product that expires soon or has already expired."""

    product: Product
    days_remaining: int
    status: ExpiryStatus

    @property
    def message(self) -> str:
        if self.days_remaining < 0:
            return f"Süresi {abs(self.days_remaining)} gün önce doldu!"
        return f"{self.days_remaining} gün kaldı"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "product": self.product.to_dict(),
            "daysRemaining": self.days_remaining,
            "status": self.status.value,
            "message": self.message,
        }


def expiring_products(
    products: Sequence[Product],
    now: Optional[Union[date, datetime]] = None,
    within_days: int = WARNING_DAYS
) -> List[ExpiryAlert]:
    """
    Alerts for products expiring within ``within_days`` days, expired ones included.

    Sorted by expiry date, earliest first.
    """
    now = now if now is not None else utc_now()

    alerts = []
    for product in sorted(products, key=lambda p: p.expiry_date):
        days = days_remaining(product.expiry_date, now)
        if days <= within_days:
            alerts.append(ExpiryAlert(product=product, days_remaining=days, status=classify(days)))
    return alerts
