"""Persistence of the product collection in a key-value store."""

import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from .kv_store import KeyValueStore
from ..models.product import Product, utc_now
from ..utils.exceptions import InvalidImportFormatError
from ..utils.logger import get_storage_logger

STORAGE_KEY = "market_takip_products"
EXPORT_FILENAME_TEMPLATE = "stok_yedek_{date}.json"


@dataclass(frozen=True)
class ExportDocument:
    """A named backup document ready to hand to the user."""

    filename: str
    content: bytes
    media_type: str = "application/json"


class PersistenceStore:
    """Loads, saves, exports and imports the whole product collection.

    The collection is stored as a single JSON array under one fixed key.
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key
        self.logger = get_storage_logger()

    def load(self) -> List[Product]:
        """
        Load the persisted collection.

        Returns an empty list when nothing is stored or the stored payload
        cannot be parsed; the failure is logged and never raised.
        """
        try:
            raw = self.store.get(self.key)
            if raw is None:
                return []

            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"Expected a JSON array, got {type(data).__name__}")

            products = [Product.from_dict(item) for item in data]
            ids = [product.id for product in products]
            if len(set(ids)) != len(ids):
                repeated = sorted({pid for pid in ids if ids.count(pid) > 1})
                raise ValueError(f"Stored collection repeats product ids: {repeated}")

            self.logger.info(f"Loaded {len(products)} products from '{self.key}'")
            return products

        except Exception as e:
            self.logger.error(f"Failed to load products: {str(e)}", exc_info=True)
            return []

    def save(self, products: Sequence[Product]):
        """
        Persist the full collection in one write.

        Raises:
            QuotaExceededError: If the document does not fit the store
            WriteFailedError: If the store cannot be written
        """
        payload = json.dumps(
            [product.to_dict() for product in products],
            ensure_ascii=False,
            separators=(",", ":")
        )
        self.store.set(self.key, payload)
        self.logger.debug(f"Saved {len(products)} products to '{self.key}'")

    def export(self, products: Sequence[Product], today: Optional[date] = None) -> ExportDocument:
        """Render the collection as a pretty-printed, dated backup document."""
        today = today or utc_now().date()
        content = json.dumps(
            [product.to_dict() for product in products],
            ensure_ascii=False,
            indent=2
        ).encode("utf-8")

        filename = EXPORT_FILENAME_TEMPLATE.format(date=today.isoformat())
        self.logger.info(f"Exported {len(products)} products as {filename}")
        return ExportDocument(filename=filename, content=content)

    def import_document(self, raw: bytes) -> List[Dict[str, Any]]:
        """
        Parse a backup document into product-shaped records.

        Args:
            raw: Document bytes (UTF-8 JSON)

        Returns:
            List of record dictionaries, in document order

        Raises:
            InvalidImportFormatError: If the document is not a JSON array of objects
        """
        try:
            text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
            data = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidImportFormatError(
                "Backup file is not valid JSON",
                details={"error": str(e)}
            )

        if not isinstance(data, list):
            raise InvalidImportFormatError(
                "Backup file must contain a JSON array",
                details={"type": type(data).__name__}
            )

        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise InvalidImportFormatError(
                    f"Backup entry {index} is not an object",
                    details={"index": index}
                )

        return data

    def storage_usage_bytes(self) -> int:
        """Size of the persisted document in bytes."""
        raw = self.store.get(self.key)
        return len(raw.encode("utf-8")) if raw else 0
