"""
Store, product, ingredient and recipe Pydantic schemas.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bakery_stock.models.store import DeliverySchedule


class StoreCreate(BaseModel):
    name: str = Field(min_length=1)
    delivery_schedule: DeliverySchedule = DeliverySchedule.DAILY


class StoreResponse(BaseModel):
    id: UUID
    name: str
    delivery_schedule: DeliverySchedule
    is_production_center: bool = False

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    selling_price: Decimal = Field(ge=0)
    min_stock_level: int = Field(default=0, ge=0)
    max_waste_percent: float = Field(default=5.0, ge=0)
    batch_yield: int = Field(default=1, ge=1)
    # Only meaningful for products without a recipe
    unit_cost: Decimal = Field(default=Decimal(0), ge=0)


class ProductUpdate(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    selling_price: Optional[Decimal] = Field(default=None, ge=0)
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    max_waste_percent: Optional[float] = Field(default=None, ge=0)
    batch_yield: Optional[int] = Field(default=None, ge=1)
    unit_cost: Optional[Decimal] = Field(default=None, ge=0)


class ProductResponse(BaseModel):
    id: UUID
    code: str
    name: str
    unit_cost: Decimal
    selling_price: Decimal
    min_stock_level: int
    max_waste_percent: float
    batch_yield: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class IngredientCreate(BaseModel):
    name: str = Field(min_length=1)
    cost_per_unit: Decimal = Field(ge=0)
    unit: str = Field(min_length=1)


class IngredientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    cost_per_unit: Optional[Decimal] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, min_length=1)


class IngredientResponse(BaseModel):
    id: UUID
    name: str
    cost_per_unit: Decimal
    unit: str

    model_config = ConfigDict(from_attributes=True)


class RecipeCreate(BaseModel):
    product_id: UUID
    ingredient_id: UUID
    quantity: Decimal = Field(gt=0)


class RecipeResponse(BaseModel):
    id: UUID
    product_id: UUID
    ingredient_id: UUID
    quantity: Decimal

    model_config = ConfigDict(from_attributes=True)


class RecipeLineCostResponse(BaseModel):
    recipe_id: UUID
    ingredient_id: UUID
    ingredient_name: str
    quantity: Decimal
    unit: str
    cost_per_unit: Decimal
    line_cost: Decimal


class ProductCostResponse(BaseModel):
    """Result of an explicit cost recalculation."""
    product_id: UUID
    batch_cost: Decimal
    batch_yield: int
    unit_cost: Decimal
    breakdown: List[RecipeLineCostResponse]

    model_config = ConfigDict(from_attributes=True)
