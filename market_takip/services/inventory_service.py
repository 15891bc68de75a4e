"""Main inventory service orchestrator."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from .image_preprocessor import ImagePreprocessor
from .notifications import ExpiryAlert, expiring_products
from .query import ALL_CATEGORIES, SortOption, query
from .repository import AppState, ProductRepository
from .scanner import ProductDraft
from .stats import aggregate, category_breakdown, recent_products
from ..models.product import Product, utc_now
from ..models.stats import InventoryStats
from ..storage.kv_store import FileKeyValueStore, KeyValueStore
from ..storage.persistence import ExportDocument, PersistenceStore
from ..utils.config import AppConfig, get_config
from ..utils.exceptions import StorageError
from ..utils.logger import get_inventory_logger, get_error_logger


class InventoryService:
    """
    Main entry point for the CLI and HTTP API.
    Wires storage, repository and derived views together.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        store: Optional[KeyValueStore] = None,
        state: Optional[AppState] = None,
        preprocessor: Optional[ImagePreprocessor] = None
    ):
        self.config = config or get_config()
        self.logger = get_inventory_logger()
        self.error_logger = get_error_logger()

        storage = self.config.storage
        self.store = store or FileKeyValueStore(storage.directory, quota_bytes=storage.quota_bytes)
        self.persistence = PersistenceStore(self.store, key=storage.key)
        self.repository = ProductRepository(self.persistence, state=state)
        self.preprocessor = preprocessor or ImagePreprocessor(
            max_width=self.config.images.max_width,
            quality=self.config.images.jpeg_quality
        )

    @property
    def state(self) -> AppState:
        return self.repository.state

    def initialize(self) -> List[Product]:
        """Load persisted products. Called once at startup."""
        products = self.repository.initialize()
        self.logger.info(f"Inventory initialized with {len(products)} products")
        return products

    def list_products(
        self,
        search: str = "",
        category: str = ALL_CATEGORIES,
        sort: Union[str, SortOption] = SortOption.EXPIRY_ASC
    ) -> List[Product]:
        return query(self.repository.snapshot(), search, category, sort)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.repository.find(product_id)

    def add_product(self, draft: ProductDraft, now: Optional[datetime] = None) -> Product:
        """
        Build a product from a draft and add it.

        Raises:
            ValueError: If the draft is incomplete or invalid
            StorageError: If the product could not be persisted (it stays in memory)
        """
        product = draft.build(now=now)
        try:
            self.repository.add(product)
        except StorageError as e:
            self.error_logger.error(f"Product {product.id} kept unsaved: {e.message}", extra={"details": e.details})
            raise
        return product

    def delete_product(self, product_id: str) -> List[Product]:
        try:
            products = self.repository.remove(product_id)
        except StorageError as e:
            self.error_logger.error(f"Delete of {product_id} not persisted: {e.message}", extra={"details": e.details})
            raise
        self.logger.info(f"Deleted product {product_id}")
        return products

    def stats(self, now: Optional[Union[date, datetime]] = None) -> InventoryStats:
        return aggregate(self.repository.snapshot(), now)

    def notifications(self, now: Optional[Union[date, datetime]] = None) -> List[ExpiryAlert]:
        return expiring_products(
            self.repository.snapshot(),
            now,
            within_days=self.config.alerts.within_days
        )

    def dashboard(self, now: Optional[Union[date, datetime]] = None) -> Dict[str, Any]:
        """Stats, category distribution and most recently listed products."""
        products = self.repository.snapshot()
        return {
            "stats": aggregate(products, now).to_dict(),
            "categories": category_breakdown(products),
            "recent": [p.to_dict() for p in recent_products(products)],
        }

    def export_backup(self, today: Optional[date] = None) -> ExportDocument:
        return self.repository.export(today=today or utc_now().date())

    def import_backup(self, raw: bytes) -> List[Product]:
        """
        Replace the whole inventory with a backup document.

        Raises:
            InvalidImportFormatError: If the document is not a JSON array of objects
            InvalidRecordError: If any record is malformed
            StorageError: If the new collection could not be persisted
        """
        products = self.repository.import_document(raw)
        self.logger.info(f"Imported {len(products)} products from backup")
        return products

    async def compress_image(self, image: Union[bytes, str], max_width: Optional[int] = None) -> str:
        return await self.preprocessor.compress(image, max_width)

    def storage_usage_kb(self) -> float:
        return round(self.persistence.storage_usage_bytes() / 1024, 2)

    def toggle_theme(self) -> bool:
        return self.state.toggle_theme()
