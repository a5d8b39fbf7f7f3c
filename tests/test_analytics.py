"""
Tests for stock alerts, the inventory dashboard and delivery forecasts.
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from bakery_stock.core.exceptions import NotFoundError
from bakery_stock.models.store import DeliverySchedule, Store
from bakery_stock.services.analytics import (
    AnalyticsService,
    classify_stock_level,
    deliveries_in_period,
)
from bakery_stock.services.deliveries import DeliveryService
from bakery_stock.services.inventory_ledger import InventoryLedger
from bakery_stock.services.reconciliation import StockReconciliationService

AS_OF = date(2024, 3, 10)


class TestLowStock:

    def test_at_minimum_not_flagged(self, db, retail_store, product):
        StockReconciliationService(db).create_stock_entry(AS_OF, product.id, retail_store.id, reported_stock=10)

        assert AnalyticsService(db).products_with_low_stock() == []

    def test_below_minimum_flagged(self, db, retail_store, product):
        StockReconciliationService(db).create_stock_entry(AS_OF, product.id, retail_store.id, reported_stock=9)

        results = AnalyticsService(db).products_with_low_stock()

        assert [(r.product.code, r.current_stock) for r in results] == [("P001", 9)]

    def test_uses_highest_count(self, db, retail_store, product):
        service = StockReconciliationService(db)
        service.create_stock_entry(AS_OF - timedelta(days=1), product.id, retail_store.id, reported_stock=12)
        service.create_stock_entry(AS_OF, product.id, retail_store.id, reported_stock=3)

        assert AnalyticsService(db).products_with_low_stock() == []

    def test_never_counted_not_reported(self, db, product):
        assert AnalyticsService(db).products_with_low_stock() == []


class TestStockDiscrepancies:

    def test_threshold_filters_entries(self, db, retail_store, product, second_product):
        service = StockReconciliationService(db)
        service.create_stock_entry(AS_OF - timedelta(days=1), product.id, retail_store.id, reported_stock=10)
        service.create_stock_entry(
            AS_OF, product.id, retail_store.id, delivered=5, waste=1, sales=2, reported_stock=13
        )
        service.create_stock_entry(AS_OF, second_product.id, retail_store.id, reported_stock=4)

        alerts = AnalyticsService(db).stock_discrepancies(threshold=5.0)

        assert len(alerts) == 1
        assert alerts[0].product_name == "Croissant"
        assert alerts[0].store_name == retail_store.name
        assert alerts[0].entry.discrepancy == pytest.approx(100 / 15)

    def test_higher_threshold_excludes(self, db, retail_store, product):
        service = StockReconciliationService(db)
        service.create_stock_entry(AS_OF - timedelta(days=1), product.id, retail_store.id, reported_stock=10)
        service.create_stock_entry(
            AS_OF, product.id, retail_store.id, delivered=5, waste=1, sales=2, reported_stock=13
        )

        assert AnalyticsService(db).stock_discrepancies(threshold=10.0) == []


class TestClassifyStockLevel:

    @pytest.mark.parametrize("current,demand,expected", [
        (30, 15, "good"),
        (20, 15, "medium"),
        (15, 15, "medium"),
        (14, 15, "low"),
        (0, 0, "good"),
    ])
    def test_levels(self, current, demand, expected):
        assert classify_stock_level(current, demand) == expected


class TestInventoryDashboard:

    def test_weekly_demand_and_suggestion(self, db, production_center, retail_store, product):
        product.unit_cost = Decimal("1.50")
        db.commit()

        InventoryLedger(db).record_production(AS_OF - timedelta(days=2), product.id, 30)
        deliveries = DeliveryService(db)
        deliveries.create_delivery(AS_OF, retail_store.id, product.id, 10)
        deliveries.record_sale(AS_OF, retail_store.id, product.id, 5)
        # Outside the trailing window
        deliveries.record_sale(AS_OF - timedelta(days=7), retail_store.id, product.id, 100)

        dashboard = AnalyticsService(db).inventory_dashboard(AS_OF)

        item = dashboard.products[0]
        assert item.current_stock == 20
        assert item.weekly_sales == 5
        assert item.weekly_deliveries == 10
        assert item.weekly_demand == 15
        assert item.suggested_production == 10
        assert item.stock_level == "medium"
        assert dashboard.low_stock_count == 0
        assert dashboard.inventory_value == Decimal("30.00")

    def test_no_activity(self, db, production_center, product):
        dashboard = AnalyticsService(db).inventory_dashboard(AS_OF)

        item = dashboard.products[0]
        assert item.weekly_demand == 0
        assert item.suggested_production == 0
        assert item.stock_level == "good"


class TestDeliveryForecast:

    @pytest.mark.parametrize("schedule,days,expected", [
        (DeliverySchedule.DAILY.value, 7, 7),
        (DeliverySchedule.EVERY_2_DAYS.value, 7, 4),
        (DeliverySchedule.EVERY_3_DAYS.value, 7, 3),
    ])
    def test_deliveries_in_period(self, schedule, days, expected):
        assert deliveries_in_period(schedule, days) == expected

    def test_recommendation(self, db, product):
        store = Store(name="Store 3 (Every 2 Days)", delivery_schedule=DeliverySchedule.EVERY_2_DAYS.value)
        db.add(store)
        db.commit()

        service = StockReconciliationService(db)
        service.create_stock_entry(date(2024, 3, 1), product.id, store.id, sales=10, waste=1)
        service.create_stock_entry(date(2024, 3, 2), product.id, store.id, sales=20, waste=1)
        # Days without sales are not averaged
        service.create_stock_entry(date(2024, 3, 3), product.id, store.id, waste=5)

        forecast = AnalyticsService(db).delivery_forecast(store.id, product.id, days=7)

        assert forecast.data_points == 2
        assert forecast.avg_daily_sales == pytest.approx(15.0)
        assert forecast.avg_daily_waste == pytest.approx(1.0)
        assert forecast.recommended_delivery == 112
        assert forecast.delivery_count == 4
        assert forecast.per_delivery_quantity == 28
        assert forecast.delivery_frequency == "every-2-days"

    def test_no_sales_history(self, db, retail_store, product):
        with pytest.raises(NotFoundError):
            AnalyticsService(db).delivery_forecast(retail_store.id, product.id)


class TestCompareSalesChannels:

    def test_reports_only_mismatches(self, db, retail_store, product, second_product):
        StockReconciliationService(db).create_stock_entry(AS_OF, product.id, retail_store.id, sales=3)
        StockReconciliationService(db).create_stock_entry(AS_OF, second_product.id, retail_store.id, sales=4)
        deliveries = DeliveryService(db)
        deliveries.record_sale(AS_OF, retail_store.id, product.id, 2)
        deliveries.record_sale(AS_OF, retail_store.id, product.id, 3)
        deliveries.record_sale(AS_OF, retail_store.id, second_product.id, 4)

        mismatches = AnalyticsService(db).compare_sales_channels(AS_OF)

        assert len(mismatches) == 1
        assert mismatches[0].product_id == product.id
        assert mismatches[0].recorded_sales == 5
        assert mismatches[0].stock_entry_sales == 3
        assert mismatches[0].difference == 2
