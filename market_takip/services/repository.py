"""Canonical in-memory product collection."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Union

from ..models.product import Product
from ..storage.persistence import ExportDocument, PersistenceStore
from ..utils.exceptions import DuplicateIdError, InvalidRecordError
from ..utils.logger import get_inventory_logger

REQUIRED_FIELDS = ("id", "name", "category", "expiryDate", "quantity")


@dataclass
class AppState:
    """Mutable application state shared by the repository and the surfaces."""

    products: List[Product] = field(default_factory=list)
    dark_mode: bool = False

    def toggle_theme(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode


class ProductRepository:
    """
    Owns the product collection and keeps it in step with persistence.

    Every mutating call writes the whole collection exactly once. If that
    write fails the in-memory change is kept and the storage error is
    raised; callers decide whether to keep it or call ``revert_unsaved``.
    """

    def __init__(self, persistence: PersistenceStore, state: Optional[AppState] = None):
        self.persistence = persistence
        self.state = state or AppState()
        self.logger = get_inventory_logger()
        self._persisted: List[Product] = list(self.state.products)
        self._dirty = False

    def initialize(self) -> List[Product]:
        """Load the persisted collection into state."""
        self.state.products = self.persistence.load()
        self._persisted = list(self.state.products)
        self._dirty = False
        return self.snapshot()

    def snapshot(self) -> List[Product]:
        return list(self.state.products)

    def find(self, product_id: str) -> Optional[Product]:
        for product in self.state.products:
            if product.id == product_id:
                return product
        return None

    @property
    def has_unsaved_changes(self) -> bool:
        return self._dirty

    def revert_unsaved(self) -> List[Product]:
        """Restore the last successfully persisted collection without writing."""
        self.state.products = list(self._persisted)
        self._dirty = False
        return self.snapshot()

    def add(self, product: Product) -> List[Product]:
        """
        Append a product and persist.

        Raises:
            DuplicateIdError: If a product with the same id exists
            StorageError: If the collection cannot be persisted
        """
        if self.find(product.id) is not None:
            raise DuplicateIdError(
                f"Product id already exists: {product.id}",
                details={"id": product.id}
            )

        self.state.products = self.state.products + [product]
        self._persist()
        self.logger.info(f"Added product '{product.name}' ({product.id})")
        return self.snapshot()

    def remove(self, product_id: str) -> List[Product]:
        """Remove a product by id and persist. Unknown ids are a no-op."""
        remaining = [p for p in self.state.products if p.id != product_id]
        if len(remaining) == len(self.state.products):
            self.logger.debug(f"Remove skipped, no product with id {product_id}")

        self.state.products = remaining
        self._persist()
        return self.snapshot()

    def replace_all(self, records: Sequence[Union[Product, Dict[str, Any]]]) -> List[Product]:
        """
        Replace the entire collection (used by import).

        Every record must be valid before anything changes; one bad record
        rejects the batch and leaves state and storage untouched.

        Raises:
            InvalidRecordError: If any record is malformed or ids repeat
            StorageError: If the collection cannot be persisted
        """
        products = []
        seen = set()
        for index, record in enumerate(records):
            product = self._to_product(index, record)
            if product.id in seen:
                raise InvalidRecordError(
                    f"Record {index} repeats id {product.id}",
                    details={"index": index, "id": product.id}
                )
            seen.add(product.id)
            products.append(product)

        self.state.products = products
        self._persist()
        self.logger.info(f"Replaced collection with {len(products)} products")
        return self.snapshot()

    def import_document(self, raw: bytes) -> List[Product]:
        """Parse a backup document and replace the collection with it."""
        records = self.persistence.import_document(raw)
        return self.replace_all(records)

    def export(self, today: Optional[date] = None) -> ExportDocument:
        return self.persistence.export(self.state.products, today=today)

    def _to_product(self, index: int, record: Union[Product, Dict[str, Any]]) -> Product:
        if isinstance(record, Product):
            return record

        if not isinstance(record, dict):
            raise InvalidRecordError(
                f"Record {index} is not an object",
                details={"index": index}
            )

        missing = [name for name in REQUIRED_FIELDS if record.get(name) in (None, "")]
        if missing:
            raise InvalidRecordError(
                f"Record {index} is missing required fields: {', '.join(missing)}",
                details={"index": index, "missing": missing}
            )

        try:
            return Product.from_dict(record)
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidRecordError(
                f"Record {index} is invalid: {str(e)}",
                details={"index": index, "id": record.get("id")}
            )

    def _persist(self):
        self._dirty = True
        self.persistence.save(self.state.products)
        self._persisted = list(self.state.products)
        self._dirty = False
