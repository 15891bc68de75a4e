"""Inventory statistics data model."""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class InventoryStats:
    """Summary counts derived from a product collection. Never persisted."""

    total_products: int = 0
    total_quantity: int = 0
    expired_count: int = 0
    critical_count: int = 0
    warning_count: int = 0

    @property
    def ok_count(self) -> int:
        """Products more than a week away from expiry."""
        return self.total_products - self.expired_count - self.critical_count - self.warning_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "totalProducts": self.total_products,
            "totalQuantity": self.total_quantity,
            "expiredCount": self.expired_count,
            "criticalCount": self.critical_count,
            "warningCount": self.warning_count,
        }

    def get_summary(self) -> str:
        """Get a human-readable summary."""
        return "\n".join([
            f"Total products: {self.total_products}",
            f"Total quantity: {self.total_quantity}",
            f"Expired: {self.expired_count}",
            f"Critical (0-3 days): {self.critical_count}",
            f"Warning (4-7 days): {self.warning_count}",
            f"OK: {self.ok_count}",
        ])
