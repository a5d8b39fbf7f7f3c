"""
Catalog orchestration: products, ingredients and recipe lines.

Any mutation that can change a product's cost calls the CostEngine
explicitly before committing:
- recipe line created or deleted -> owning product
- ingredient cost changed or ingredient deleted -> every product using it
- product batch_yield changed -> that product
"""
import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bakery_stock.core.exceptions import ConflictError, NotFoundError, ValidationError
from bakery_stock.models.product import Ingredient, Product, Recipe
from bakery_stock.services.cost_engine import CostEngine, ProductCost

logger = logging.getLogger(__name__)


class CatalogService:

    def __init__(self, db: Session):
        self.db = db
        self.cost_engine = CostEngine(db)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("A record with the same unique value already exists") from e
        except Exception:
            self.db.rollback()
            raise

    def _flush(self) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("A record with the same unique value already exists") from e
        except Exception:
            self.db.rollback()
            raise

    def _has_recipe(self, product_id: UUID) -> bool:
        return self.db.execute(
            select(Recipe.id).where(Recipe.product_id == product_id).limit(1)
        ).first() is not None

    # ============ Products ============

    def get_product(self, product_id: UUID) -> Product:
        product = self.db.get(Product, product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def list_products(self) -> list[Product]:
        return list(self.db.execute(select(Product).order_by(Product.name)).scalars().all())

    def create_product(self, data: dict[str, Any]) -> Product:
        product = Product(**data)
        self.db.add(product)
        self._commit()
        self.db.refresh(product)
        logger.info(f"Created product {product.code}")
        return product

    def update_product(self, product_id: UUID, fields: dict[str, Any]) -> Product:
        """
        Apply non-null fields. A batch_yield change recalculates unit_cost
        only when the product has recipe lines; otherwise a manually set
        unit_cost is kept.
        """
        product = self.get_product(product_id)
        fields = {name: value for name, value in fields.items() if value is not None}
        has_recipe = self._has_recipe(product_id)

        if "unit_cost" in fields and has_recipe:
            raise ValidationError(
                "unit_cost is derived from the recipe and cannot be set directly",
                field="unit_cost",
            )

        yield_changed = "batch_yield" in fields and fields["batch_yield"] != product.batch_yield
        for name, value in fields.items():
            setattr(product, name, value)

        if yield_changed and has_recipe:
            self._flush()
            self.cost_engine.recalculate_product_cost(product_id)

        self._commit()
        self.db.refresh(product)
        return product

    def delete_product(self, product_id: UUID) -> None:
        product = self.get_product(product_id)
        self.db.delete(product)
        self._commit()
        logger.info(f"Deleted product {product_id}")

    def recalculate(self, product_id: UUID) -> ProductCost:
        result = self.cost_engine.recalculate_product_cost(product_id)
        if result is None:
            raise NotFoundError("Product", product_id)
        self._commit()
        return result

    # ============ Ingredients ============

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient:
        ingredient = self.db.get(Ingredient, ingredient_id)
        if not ingredient:
            raise NotFoundError("Ingredient", ingredient_id)
        return ingredient

    def list_ingredients(self) -> list[Ingredient]:
        return list(self.db.execute(select(Ingredient).order_by(Ingredient.name)).scalars().all())

    def create_ingredient(self, data: dict[str, Any]) -> Ingredient:
        ingredient = Ingredient(**data)
        self.db.add(ingredient)
        self._commit()
        self.db.refresh(ingredient)
        return ingredient

    def update_ingredient(self, ingredient_id: UUID, fields: dict[str, Any]) -> Ingredient:
        ingredient = self.get_ingredient(ingredient_id)
        for name, value in fields.items():
            if value is None:
                continue
            setattr(ingredient, name, value)
        self._flush()

        affected = self.cost_engine.products_using_ingredient(ingredient_id)
        self.cost_engine.recalculate_for_products(affected)

        self._commit()
        self.db.refresh(ingredient)
        logger.info(f"Updated ingredient {ingredient.name}; recalculated {len(affected)} product(s)")
        return ingredient

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        ingredient = self.get_ingredient(ingredient_id)
        affected = self.cost_engine.products_using_ingredient(ingredient_id)

        self.db.delete(ingredient)
        self._flush()
        self.cost_engine.recalculate_for_products(affected)
        self._commit()

    # ============ Recipes ============

    def list_recipes(self, product_id: UUID) -> list[Recipe]:
        self.get_product(product_id)
        return list(self.db.execute(
            select(Recipe).where(Recipe.product_id == product_id).order_by(Recipe.created_at)
        ).scalars().all())

    def create_recipe(self, product_id: UUID, ingredient_id: UUID, quantity: Decimal) -> Recipe:
        if quantity is None or quantity <= 0:
            raise ValidationError("quantity must be greater than zero", field="quantity")
        self.get_product(product_id)
        self.get_ingredient(ingredient_id)

        recipe = Recipe(product_id=product_id, ingredient_id=ingredient_id, quantity=quantity)
        self.db.add(recipe)
        self._flush()
        self.cost_engine.recalculate_product_cost(product_id)

        self._commit()
        self.db.refresh(recipe)
        return recipe

    def delete_recipe(self, recipe_id: UUID) -> None:
        recipe = self.db.get(Recipe, recipe_id)
        if not recipe:
            raise NotFoundError("Recipe", recipe_id)

        product_id = recipe.product_id
        self.db.delete(recipe)
        self._flush()
        self.cost_engine.recalculate_product_cost(product_id)
        self._commit()
