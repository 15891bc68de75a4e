"""Tests for statistics and notifications."""

from datetime import datetime, timedelta

from market_takip.services.expiry import ExpiryStatus
from market_takip.services.notifications import expiring_products
from market_takip.services.stats import aggregate, category_breakdown, recent_products

from conftest import make_product


class TestAggregate:
    """Tests for aggregate."""

    def test_example_scenario(self, today):
        products = [
            make_product("a", days=2, quantity=5),
            make_product("b", days=10, quantity=1),
        ]

        stats = aggregate(products, today)

        assert stats.to_dict() == {
            "totalProducts": 2,
            "totalQuantity": 6,
            "criticalCount": 1,
            "warningCount": 0,
            "expiredCount": 0,
        }

    def test_empty_collection(self, today):
        stats = aggregate([], today)

        assert stats.total_products == 0
        assert stats.total_quantity == 0
        assert stats.ok_count == 0

    def test_buckets_partition_collection(self, sample_products, today):
        """Test that every product lands in exactly one bucket."""
        stats = aggregate(sample_products, today)

        assert stats.expired_count == 1
        assert stats.critical_count == 2
        assert stats.warning_count == 1
        assert stats.ok_count == 1
        assert (
            stats.expired_count + stats.critical_count + stats.warning_count + stats.ok_count
            == stats.total_products
        )
        assert stats.total_quantity == 24

    def test_boundary_days(self, today):
        products = [make_product(str(d), days=d) for d in (-1, 0, 3, 4, 7, 8)]

        stats = aggregate(products, today)

        assert stats.expired_count == 1
        assert stats.critical_count == 2
        assert stats.warning_count == 2
        assert stats.ok_count == 1

    def test_defaults_to_current_time(self):
        product = make_product("far", days=10000)

        assert aggregate([product]).ok_count == 1


class TestDashboardViews:
    """Tests for category breakdown and recent products."""

    def test_category_breakdown(self, sample_products):
        extra = make_product("f", name="Peynir")

        counts = category_breakdown(sample_products + [extra])

        assert counts["Süt ve Kahvaltılık"] == 2
        assert counts["Meyve ve Sebze"] == 1
        assert list(counts)[0] == "Süt ve Kahvaltılık"

    def test_recent_products_keeps_insertion_order(self, sample_products):
        assert [p.id for p in recent_products(sample_products, limit=3)] == ["a", "b", "c"]
        assert len(recent_products(sample_products)) == 5


class TestExpiringProducts:
    """Tests for the notification list."""

    def test_includes_expired_and_within_a_week(self, sample_products, today):
        alerts = expiring_products(sample_products, today)

        assert [a.product.id for a in alerts] == ["c", "a", "e", "d"]
        assert alerts[0].status is ExpiryStatus.EXPIRED
        assert alerts[-1].status is ExpiryStatus.WARNING

    def test_messages(self, today):
        expired = make_product("x", days=-3)
        soon = make_product("y", days=2)

        alerts = expiring_products([expired, soon], today)

        assert alerts[0].message == "Süresi 3 gün önce doldu!"
        assert alerts[1].message == "2 gün kaldı"

    def test_custom_window(self, sample_products, today):
        alerts = expiring_products(sample_products, today, within_days=2)

        assert [a.product.id for a in alerts] == ["c", "a", "e"]

    def test_partial_day_rounds_up(self, today):
        now = datetime.combine(today, datetime.min.time()) + timedelta(hours=12)

        alerts = expiring_products([make_product("z", days=7), make_product("w", days=8)], now)

        assert len(alerts) == 1
        assert alerts[0].days_remaining == 7
        assert alerts[0].to_dict()["status"] == "warning"
