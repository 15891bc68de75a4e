"""Product data model."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any


class Category(str, Enum):
    """Closed set of product categories. Values are the labels shown to users."""

    DAIRY_BREAKFAST = "Süt ve Kahvaltılık"
    MEAT_POULTRY = "Et ve Tavuk"
    FRUIT_VEGETABLES = "Meyve ve Sebze"
    BEVERAGES = "İçecekler"
    SNACKS = "Atıştırmalık"
    CLEANING = "Temizlik"
    OTHER = "Diğer"


def utc_now() -> datetime:
    """Current wall clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_timestamp(value: datetime) -> datetime:
    """Make a timestamp aware (naive means UTC) and drop sub-millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def parse_expiry_date(value: Any) -> date:
    """Coerce a date, datetime or ISO string into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Full ISO datetimes keep only their date part
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Invalid expiry date: {value!r}")


@dataclass(frozen=True, eq=False)
class Product:
    """A perishable product in the inventory.

    Identity is the ``id`` alone: two records with the same id compare equal
    regardless of their other fields.
    """

    id: str
    barcode: str
    name: str
    category: Category
    expiry_date: date
    quantity: int
    image: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate and normalize data."""
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("Product id cannot be empty")

        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Product name cannot be empty")

        if not isinstance(self.barcode, str):
            raise ValueError("Barcode must be a string")

        try:
            category = Category(self.category)
        except ValueError:
            raise ValueError(f"Unknown category: {self.category!r}")
        object.__setattr__(self, "category", category)

        object.__setattr__(self, "expiry_date", parse_expiry_date(self.expiry_date))

        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("Quantity must be an integer")
        if self.quantity < 1:
            raise ValueError("Quantity must be at least 1")

        if self.image is not None and not isinstance(self.image, str):
            raise ValueError("Image must be an embedded data string")

        if not isinstance(self.created_at, datetime):
            raise ValueError("createdAt must be a timestamp")
        # Stored timestamps carry milliseconds only
        object.__setattr__(self, "created_at", normalize_timestamp(self.created_at))

        if self.updated_at is None:
            object.__setattr__(self, "updated_at", self.created_at)
        elif not isinstance(self.updated_at, datetime):
            raise ValueError("updatedAt must be a timestamp")
        else:
            object.__setattr__(self, "updated_at", normalize_timestamp(self.updated_at))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def create(
        cls,
        name: str,
        barcode: str,
        category: Category,
        expiry_date: Any,
        quantity: int = 1,
        image: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> "Product":
        """Build a new product with a fresh id and matching timestamps."""
        created = now or utc_now()
        return cls(
            id=str(uuid.uuid4()),
            barcode=barcode,
            name=name,
            category=category,
            expiry_date=expiry_date,
            quantity=quantity,
            image=image,
            created_at=created,
            updated_at=created
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored/exported dictionary representation."""
        data = {
            "id": self.id,
            "barcode": self.barcode,
            "name": self.name,
            "category": self.category.value,
            "expiryDate": self.expiry_date.isoformat(),
            "quantity": self.quantity,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.image is not None:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """Create instance from dictionary.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field holds an invalid value
        """
        created_at = data.get("createdAt")
        if isinstance(created_at, str):
            created_at = parse_timestamp(created_at)
        elif created_at is None:
            created_at = utc_now()

        updated_at = data.get("updatedAt")
        if isinstance(updated_at, str):
            updated_at = parse_timestamp(updated_at)

        return cls(
            id=data["id"],
            barcode=data.get("barcode", ""),
            name=data["name"],
            category=data["category"],
            expiry_date=data["expiryDate"],
            quantity=data["quantity"],
            image=data.get("image"),
            created_at=created_at,
            updated_at=updated_at
        )
