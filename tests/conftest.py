"""Pytest configuration and fixtures."""

import io
from datetime import date, datetime, timedelta, timezone

import pytest
from PIL import Image

from market_takip.models.product import Category, Product
from market_takip.services.repository import ProductRepository
from market_takip.storage.kv_store import MemoryKeyValueStore
from market_takip.storage.persistence import PersistenceStore


TODAY = date(2024, 6, 10)
CREATED = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)


def make_product(
    product_id: str,
    days: int = 10,
    name: str = "Süt",
    quantity: int = 1,
    category: Category = Category.DAIRY_BREAKFAST,
    barcode: str = "8690000000001",
    image: str = None
) -> Product:
    """Build a product expiring ``days`` days after TODAY."""
    return Product(
        id=product_id,
        barcode=barcode,
        name=name,
        category=category,
        expiry_date=TODAY + timedelta(days=days),
        quantity=quantity,
        image=image,
        created_at=CREATED
    )


def make_image_bytes(size=(600, 400), fmt="PNG", color=(200, 30, 30)) -> bytes:
    """Encode a solid-colour test image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def sample_product():
    """Create a sample Product for testing."""
    return make_product("p-001", days=5, name="Beyaz Peynir", quantity=3)


@pytest.fixture
def sample_products():
    """A small mixed inventory relative to TODAY."""
    return [
        make_product("a", days=2, name="Yoğurt", quantity=5, barcode="111"),
        make_product("b", days=10, name="elma", quantity=1, category=Category.FRUIT_VEGETABLES, barcode="222"),
        make_product("c", days=-1, name="Tavuk Göğsü", quantity=2, category=Category.MEAT_POULTRY, barcode="333"),
        make_product("d", days=6, name="Ayran", quantity=12, category=Category.BEVERAGES, barcode="444"),
        make_product("e", days=2, name="Çikolata", quantity=4, category=Category.SNACKS, barcode="555"),
    ]


@pytest.fixture
def memory_store():
    return MemoryKeyValueStore()


@pytest.fixture
def persistence(memory_store):
    return PersistenceStore(memory_store)


@pytest.fixture
def repository(persistence):
    repo = ProductRepository(persistence)
    repo.initialize()
    return repo


@pytest.fixture
def image_bytes():
    return make_image_bytes()
