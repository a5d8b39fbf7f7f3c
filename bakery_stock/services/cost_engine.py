"""
Cost engine: recipe-based product costing.

unit_cost = Σ (ingredient.cost_per_unit × recipe.quantity) / batch_yield

The sum is the batch cost, i.e. the ingredient cost of one production
batch that yields `batch_yield` sellable units. unit_cost is stored per
unit so margins (selling_price - unit_cost) compare like with like.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from bakery_stock.models.product import Ingredient, Product, Recipe

logger = logging.getLogger(__name__)

COST_QUANTUM = Decimal("0.0001")


@dataclass
class RecipeLineCost:
    """Cost of a single recipe line."""
    recipe_id: UUID
    ingredient_id: UUID
    ingredient_name: str
    quantity: Decimal
    unit: str
    cost_per_unit: Decimal
    line_cost: Decimal  # quantity * cost_per_unit


@dataclass
class ProductCost:
    """Result of a cost recalculation."""
    product_id: UUID
    batch_cost: Decimal
    batch_yield: int
    unit_cost: Decimal
    breakdown: list[RecipeLineCost]


@dataclass
class ProductProfitability:
    product_id: UUID
    code: str
    name: str
    unit_cost: Decimal
    selling_price: Decimal
    margin: Decimal  # selling_price - unit_cost
    margin_percentage: Decimal


class CostEngine:
    """
    Recalculates product costs from their recipes.

    Recalculation is an explicit operation: callers that change a recipe
    line, an ingredient price or a batch yield invoke it afterwards.
    Methods flush but do not commit; the calling operation owns the
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def recipe_breakdown(self, product_id: UUID) -> list[RecipeLineCost]:
        rows = self.db.execute(
            select(Recipe, Ingredient)
            .join(Ingredient, Recipe.ingredient_id == Ingredient.id)
            .where(Recipe.product_id == product_id)
        ).all()

        breakdown = []
        for recipe, ingredient in rows:
            cost_per_unit = Decimal(ingredient.cost_per_unit or 0)
            quantity = Decimal(recipe.quantity)
            breakdown.append(RecipeLineCost(
                recipe_id=recipe.id,
                ingredient_id=ingredient.id,
                ingredient_name=ingredient.name,
                quantity=quantity,
                unit=ingredient.unit,
                cost_per_unit=cost_per_unit,
                line_cost=quantity * cost_per_unit,
            ))
        return breakdown

    def recalculate_product_cost(self, product_id: UUID) -> Optional[ProductCost]:
        """
        Recompute and persist unit_cost for a product.

        Returns None (no-op) if the product does not exist. A product
        without recipe lines gets a unit cost of zero.
        """
        product = self.db.get(Product, product_id)
        if not product:
            return None

        breakdown = self.recipe_breakdown(product_id)
        batch_cost = sum((line.line_cost for line in breakdown), Decimal(0))
        batch_yield = product.batch_yield if product.batch_yield and product.batch_yield > 0 else 1
        unit_cost = (batch_cost / batch_yield).quantize(COST_QUANTUM)

        product.unit_cost = unit_cost
        self.db.flush()

        logger.info(
            f"Recalculated cost for product {product.code}: "
            f"batch_cost={batch_cost} yield={batch_yield} unit_cost={unit_cost}"
        )
        return ProductCost(
            product_id=product.id,
            batch_cost=batch_cost,
            batch_yield=batch_yield,
            unit_cost=unit_cost,
            breakdown=breakdown,
        )

    def products_using_ingredient(self, ingredient_id: UUID) -> list[UUID]:
        """Distinct product ids with a recipe line referencing the ingredient."""
        return list(self.db.execute(
            select(Recipe.product_id)
            .where(Recipe.ingredient_id == ingredient_id)
            .distinct()
        ).scalars().all())

    def recalculate_for_products(self, product_ids: list[UUID]) -> list[ProductCost]:
        results = []
        for product_id in product_ids:
            result = self.recalculate_product_cost(product_id)
            if result:
                results.append(result)
        return results

    def profitability(self, product: Product) -> ProductProfitability:
        unit_cost = Decimal(product.unit_cost or 0)
        selling_price = Decimal(product.selling_price or 0)
        margin = selling_price - unit_cost
        margin_pct = (margin / selling_price * 100) if selling_price else Decimal(0)

        return ProductProfitability(
            product_id=product.id,
            code=product.code,
            name=product.name,
            unit_cost=unit_cost,
            selling_price=selling_price,
            margin=margin,
            margin_percentage=margin_pct,
        )

    def product_profitability(self) -> list[ProductProfitability]:
        """
        Margin for every product.

        Returns list sorted by margin percentage (lowest first).
        """
        products = self.db.execute(select(Product)).scalars().all()
        results = [self.profitability(p) for p in products]
        results.sort(key=lambda r: r.margin_percentage)
        return results
