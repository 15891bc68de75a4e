"""Tests for data models."""

import pytest
from datetime import date, datetime, timezone

from market_takip.models.product import Category, Product
from market_takip.models.stats import InventoryStats

from conftest import CREATED, make_product


class TestProduct:
    """Tests for Product model."""

    def test_create_product(self):
        """Test creating a product through the factory."""
        now = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        product = Product.create(
            name="Süt",
            barcode="8690000000001",
            category=Category.DAIRY_BREAKFAST,
            expiry_date="2024-06-20",
            quantity=2,
            now=now
        )

        assert product.id
        assert product.expiry_date == date(2024, 6, 20)
        assert product.created_at == now
        assert product.updated_at == product.created_at
        assert product.image is None

    def test_create_generates_unique_ids(self):
        """Test that each created product gets a fresh id."""
        ids = {
            Product.create("Süt", "1", Category.OTHER, "2024-06-20").id
            for _ in range(50)
        }

        assert len(ids) == 50

    def test_category_from_label(self):
        """Test that category labels are coerced to the enum."""
        product = Product(
            id="x", barcode="", name="Deterjan", category="Temizlik",
            expiry_date=date(2025, 1, 1), quantity=1
        )

        assert product.category is Category.CLEANING

    def test_validation_unknown_category(self):
        """Test that unknown categories raise ValueError."""
        with pytest.raises(ValueError, match="Unknown category"):
            Product(
                id="x", barcode="", name="Pil", category="Elektronik",
                expiry_date=date(2025, 1, 1), quantity=1
            )

    def test_validation_empty_name(self):
        """Test that a blank name raises ValueError."""
        with pytest.raises(ValueError, match="name cannot be empty"):
            make_product("x", name="   ")

    def test_validation_zero_quantity(self):
        """Test that quantity below one raises ValueError."""
        with pytest.raises(ValueError, match="at least 1"):
            make_product("x", quantity=0)

    def test_validation_bool_quantity(self):
        """Test that booleans are not accepted as quantities."""
        with pytest.raises(ValueError, match="integer"):
            make_product("x", quantity=True)

    def test_equality_by_id(self):
        """Test that equality and hashing use the id only."""
        first = make_product("same", name="Süt")
        second = make_product("same", name="Ayran", quantity=9)

        assert first == second
        assert len({first, second}) == 1
        assert first != make_product("other")

    def test_product_is_immutable(self, sample_product):
        """Test that fields cannot be reassigned."""
        with pytest.raises(AttributeError):
            sample_product.quantity = 10

    def test_to_dict(self, sample_product):
        """Test converting Product to the wire format."""
        data = sample_product.to_dict()

        assert data["id"] == "p-001"
        assert data["category"] == "Süt ve Kahvaltılık"
        assert data["expiryDate"] == "2024-06-15"
        assert data["quantity"] == 3
        assert data["createdAt"] == "2024-06-01T09:30:00.000Z"
        assert data["updatedAt"] == data["createdAt"]
        assert "image" not in data

    def test_from_dict(self):
        """Test creating Product from a stored record."""
        data = {
            "id": "abc",
            "barcode": "123",
            "name": "Domates",
            "category": "Meyve ve Sebze",
            "expiryDate": "2024-07-01",
            "quantity": 4,
            "image": "data:image/jpeg;base64,AAAA",
            "createdAt": "2024-06-01T09:30:00.000Z",
            "updatedAt": "2024-06-01T09:30:00.000Z"
        }

        product = Product.from_dict(data)

        assert product.category is Category.FRUIT_VEGETABLES
        assert product.expiry_date == date(2024, 7, 1)
        assert product.created_at == CREATED
        assert product.to_dict() == data

    def test_from_dict_defaults(self):
        """Test optional fields in a stored record."""
        product = Product.from_dict({
            "id": "abc",
            "name": "Ekmek",
            "category": "Diğer",
            "expiryDate": "2024-07-01T00:00:00.000Z",
            "quantity": 1
        })

        assert product.barcode == ""
        assert product.expiry_date == date(2024, 7, 1)
        assert product.updated_at == product.created_at

    def test_from_dict_missing_name(self):
        """Test that a missing required field raises KeyError."""
        with pytest.raises(KeyError):
            Product.from_dict({"id": "abc", "category": "Diğer", "expiryDate": "2024-07-01", "quantity": 1})

    def test_timestamps_truncated_to_milliseconds(self):
        """Test that timestamps keep only the precision the wire format carries."""
        product = Product(
            id="a",
            barcode="1",
            name="Süt",
            category=Category.OTHER,
            expiry_date=date(2024, 7, 1),
            quantity=1,
            created_at=datetime(2024, 6, 10, 12, 0, 0, 987654)
        )

        assert product.created_at == datetime(2024, 6, 10, 12, 0, 0, 987000, tzinfo=timezone.utc)
        assert product.to_dict()["createdAt"] == "2024-06-10T12:00:00.987Z"
        assert Product.from_dict(product.to_dict()).created_at == product.created_at


class TestInventoryStats:
    """Tests for InventoryStats model."""

    def test_ok_count(self):
        """Test that ok_count is what remains after the other buckets."""
        stats = InventoryStats(
            total_products=10, total_quantity=30,
            expired_count=1, critical_count=2, warning_count=3
        )

        assert stats.ok_count == 4

    def test_to_dict(self):
        """Test the camelCase dictionary form."""
        stats = InventoryStats(total_products=2, total_quantity=6, critical_count=1)

        assert stats.to_dict() == {
            "totalProducts": 2,
            "totalQuantity": 6,
            "expiredCount": 0,
            "criticalCount": 1,
            "warningCount": 0,
        }

    def test_get_summary(self):
        """Test getting summary string."""
        stats = InventoryStats(total_products=3, total_quantity=7, expired_count=1)

        summary = stats.get_summary()

        assert "Total products: 3" in summary
        assert "Total quantity: 7" in summary
        assert "Expired: 1" in summary
        assert "OK: 2" in summary
