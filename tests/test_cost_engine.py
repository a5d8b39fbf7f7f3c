"""
Tests for recipe costing and the catalog operations that trigger it.
"""
from decimal import Decimal

import pytest

from bakery_stock.core.exceptions import ConflictError, NotFoundError, ValidationError
from bakery_stock.services.catalog import CatalogService
from bakery_stock.services.cost_engine import CostEngine


@pytest.fixture
def croissant_recipe(db, product, flour, butter):
    """2 kg flour at 0.50 + 1 kg butter at 3.00 per batch."""
    catalog = CatalogService(db)
    flour_line = catalog.create_recipe(product.id, flour.id, Decimal("2"))
    butter_line = catalog.create_recipe(product.id, butter.id, Decimal("1"))
    return flour_line, butter_line


class TestRecalculateProductCost:

    def test_sums_recipe_lines(self, db, product, croissant_recipe):
        """Unit cost is the sum of quantity x ingredient cost."""
        db.refresh(product)
        assert product.unit_cost == Decimal("4.0")

    def test_breakdown_lists_each_line(self, db, product, croissant_recipe):
        result = CostEngine(db).recalculate_product_cost(product.id)

        assert result.batch_cost == Decimal("4.0")
        assert len(result.breakdown) == 2
        line_costs = sorted(line.line_cost for line in result.breakdown)
        assert line_costs == [Decimal("1.0"), Decimal("3.0")]

    def test_recalculation_is_idempotent(self, db, product, croissant_recipe):
        engine = CostEngine(db)
        first = engine.recalculate_product_cost(product.id)
        second = engine.recalculate_product_cost(product.id)

        assert first.unit_cost == second.unit_cost
        assert product.unit_cost == second.unit_cost

    def test_divides_by_batch_yield(self, db, product, croissant_recipe):
        """unit_cost is per sellable unit: batch cost divided by batch_yield."""
        CatalogService(db).update_product(product.id, {"batch_yield": 4})

        db.refresh(product)
        assert product.unit_cost == Decimal("1.0")

    def test_product_without_recipe_costs_zero(self, db, product):
        result = CostEngine(db).recalculate_product_cost(product.id)

        assert result.unit_cost == Decimal("0")
        assert result.breakdown == []

    def test_missing_product_is_a_no_op(self, db):
        from uuid import uuid4

        assert CostEngine(db).recalculate_product_cost(uuid4()) is None


class TestCostTriggers:
    """Catalog mutations that change a product's cost recalculate it."""

    def test_ingredient_price_change_updates_products(self, db, product, flour, croissant_recipe):
        CatalogService(db).update_ingredient(flour.id, {"cost_per_unit": Decimal("1.00")})

        db.refresh(product)
        assert product.unit_cost == Decimal("5.0")

    def test_recipe_line_delete_updates_product(self, db, product, croissant_recipe):
        _, butter_line = croissant_recipe
        CatalogService(db).delete_recipe(butter_line.id)

        db.refresh(product)
        assert product.unit_cost == Decimal("1.0")

    def test_ingredient_delete_updates_products(self, db, product, butter, croissant_recipe):
        CatalogService(db).delete_ingredient(butter.id)

        db.refresh(product)
        assert product.unit_cost == Decimal("1.0")

    def test_unit_cost_cannot_be_set_when_recipe_exists(self, db, product, croissant_recipe):
        with pytest.raises(ValidationError) as exc_info:
            CatalogService(db).update_product(product.id, {"unit_cost": Decimal("0.10")})

        assert exc_info.value.field == "unit_cost"

    def test_unit_cost_can_be_set_without_recipe(self, db, product):
        CatalogService(db).update_product(product.id, {"unit_cost": Decimal("1.25")})

        db.refresh(product)
        assert product.unit_cost == Decimal("1.25")

    def test_batch_yield_change_keeps_manual_cost_without_recipe(self, db, product):
        catalog = CatalogService(db)
        catalog.update_product(product.id, {"unit_cost": Decimal("1.25")})

        catalog.update_product(product.id, {"batch_yield": 4})

        db.refresh(product)
        assert product.batch_yield == 4
        assert product.unit_cost == Decimal("1.25")

    def test_failed_flush_rolls_back(self, db, product, second_product, croissant_recipe):
        """A unique violation during a cost-triggering update leaves the session usable."""
        with pytest.raises(ConflictError):
            CatalogService(db).update_product(product.id, {"code": second_product.code, "batch_yield": 2})

        db.refresh(product)
        assert product.code == "P001"
        assert product.batch_yield == 1

    def test_null_fields_are_ignored(self, db, product, flour):
        catalog = CatalogService(db)

        catalog.update_product(product.id, {"name": None, "selling_price": Decimal("3.75")})
        catalog.update_ingredient(flour.id, {"name": None, "unit": None, "cost_per_unit": Decimal("0.60")})

        db.refresh(product)
        db.refresh(flour)
        assert product.name == "Croissant"
        assert product.selling_price == Decimal("3.75")
        assert flour.name == "Flour"
        assert flour.unit == "kg"
        assert flour.cost_per_unit == Decimal("0.60")

    def test_recipe_quantity_must_be_positive(self, db, product, flour):
        with pytest.raises(ValidationError):
            CatalogService(db).create_recipe(product.id, flour.id, Decimal("0"))

    def test_recipe_for_unknown_product(self, db, flour):
        from uuid import uuid4

        with pytest.raises(NotFoundError):
            CatalogService(db).create_recipe(uuid4(), flour.id, Decimal("1"))


class TestProfitability:

    def test_sorted_by_margin_percentage(self, db, product, second_product, croissant_recipe):
        """Croissant costs 4.00 and sells at 3.50, so it comes first."""
        results = CostEngine(db).product_profitability()

        assert [r.code for r in results] == ["P001", "P002"]
        assert results[0].margin == Decimal("-0.5")
        assert results[1].margin_percentage == Decimal("100")
