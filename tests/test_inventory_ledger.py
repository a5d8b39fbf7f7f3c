"""
Tests for the inventory ledger.
"""
from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from bakery_stock.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from bakery_stock.models.inventory import InventoryLedgerEntry, MovementType
from bakery_stock.services.inventory_ledger import InventoryLedger


def ledger_row_count(db) -> int:
    return db.execute(select(func.count(InventoryLedgerEntry.id))).scalar_one()


class TestRecordProduction:

    def test_production_accumulates(self, db, production_center, product):
        ledger = InventoryLedger(db)
        ledger.record_production(date(2024, 3, 1), product.id, 30)
        entry = ledger.record_production(date(2024, 3, 2), product.id, 20)

        assert entry.quantity_in_stock == 50
        assert entry.quantity_produced == 20
        assert entry.movement_type == MovementType.PRODUCTION.value
        assert entry.store_id == production_center.id
        assert ledger.current_stock(product.id) == 50

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_non_positive_quantity_rejected(self, db, production_center, product, quantity):
        with pytest.raises(ValidationError):
            InventoryLedger(db).record_production(date(2024, 3, 1), product.id, quantity)

        assert ledger_row_count(db) == 0

    def test_unknown_product(self, db, production_center):
        from uuid import uuid4

        with pytest.raises(NotFoundError):
            InventoryLedger(db).record_production(date(2024, 3, 1), uuid4(), 10)

    def test_requires_production_center(self, db, product):
        with pytest.raises(NotFoundError):
            InventoryLedger(db).record_production(date(2024, 3, 1), product.id, 10)


class TestUpdateInventoryStock:

    def test_rejects_negative_total(self, db, production_center, product):
        """A deduction larger than stock fails and changes nothing."""
        ledger = InventoryLedger(db)
        ledger.record_production(date(2024, 3, 1), product.id, 50)
        rows_before = ledger_row_count(db)

        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.update_inventory_stock(product.id, -100)

        assert exc_info.value.available == 50
        assert exc_info.value.requested == 100
        assert ledger.current_stock(product.id) == 50
        assert ledger_row_count(db) == rows_before

    def test_deduction_to_zero_allowed(self, db, production_center, product):
        ledger = InventoryLedger(db)
        ledger.record_production(date(2024, 3, 1), product.id, 50)

        entry = ledger.update_inventory_stock(product.id, -50, reason="Stock write-off")

        assert entry.quantity_in_stock == 0
        assert entry.quantity_change == -50
        assert entry.notes == "Stock write-off"

    def test_store_scoped_levels(self, db, production_center, retail_store, product):
        ledger = InventoryLedger(db)
        ledger.update_inventory_stock(product.id, 5, store_id=retail_store.id)

        assert ledger.current_stock(product.id, retail_store.id) == 5
        assert ledger.current_stock(product.id) == 0

    def test_unknown_store_is_not_found(self, db, production_center, product):
        ledger = InventoryLedger(db)

        with pytest.raises(NotFoundError) as exc_info:
            ledger.update_inventory_stock(product.id, 5, store_id=uuid4())

        assert exc_info.value.entity == "Store"
        assert ledger_row_count(db) == 0


class TestCurrentLevels:

    def test_every_product_reported(self, db, production_center, product, second_product):
        """Products without ledger history report zero."""
        ledger = InventoryLedger(db)
        ledger.record_production(date(2024, 3, 1), product.id, 12)

        levels = ledger.get_current_inventory_levels()

        assert levels == {product.id: 12, second_product.id: 0}

    def test_unknown_store_rejected(self, db, production_center, product):
        with pytest.raises(NotFoundError):
            InventoryLedger(db).get_current_inventory_levels(uuid4())

    def test_history_newest_first(self, db, production_center, product):
        ledger = InventoryLedger(db)
        ledger.record_production(date(2024, 3, 1), product.id, 10)
        ledger.record_production(date(2024, 3, 2), product.id, 5)

        history = ledger.history(product.id)

        assert [h.date for h in history] == [date(2024, 3, 2), date(2024, 3, 1)]
        assert [h.quantity_in_stock for h in history] == [15, 10]
