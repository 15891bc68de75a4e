"""Summary statistics over a product snapshot."""

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Union

from .expiry import ExpiryStatus, classify, days_remaining
from ..models.product import Product, utc_now
from ..models.stats import InventoryStats


def aggregate(
    products: Sequence[Product],
    now: Optional[Union[date, datetime]] = None
) -> InventoryStats:
    """
    Count products and stock, bucketed by expiry status.

    ``now`` is read once and shared by every product so a boundary cannot
    move part way through the pass.
    """
    now = now if now is not None else utc_now()

    counts = {status: 0 for status in ExpiryStatus}
    total_quantity = 0
    for product in products:
        total_quantity += product.quantity
        counts[classify(days_remaining(product.expiry_date, now))] += 1

    return InventoryStats(
        total_products=len(products),
        total_quantity=total_quantity,
        expired_count=counts[ExpiryStatus.EXPIRED],
        critical_count=counts[ExpiryStatus.CRITICAL],
        warning_count=counts[ExpiryStatus.WARNING],
    )


def category_breakdown(products: Sequence[Product]) -> Dict[str, int]:
    """Number of products per category label, in first-seen order."""
    counts: Dict[str, int] = {}
    for product in products:
        label = product.category.value
        counts[label] = counts.get(label, 0) + 1
    return counts


def recent_products(products: Sequence[Product], limit: int = 5) -> List[Product]:
    """First ``limit`` products in insertion order."""
    return list(products[:limit])
