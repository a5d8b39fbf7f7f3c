"""
Product catalog and recipe costing models.
"""
import uuid
from sqlalchemy import Column, String, Integer, Float, Numeric, DateTime, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship

from bakery_stock.db.base import Base


class Ingredient(Base):
    """A raw ingredient bought by the production center."""
    __tablename__ = "ingredients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    cost_per_unit = Column(Numeric(10, 4), nullable=False)
    unit = Column(String(50), nullable=False)  # kg, liter, piece
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    recipes = relationship("Recipe", back_populates="ingredient", cascade="all, delete-orphan")


class Product(Base):
    """A sellable bakery product."""
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)

    # Per-unit cost: batch ingredient cost / batch_yield. Derived when a recipe exists.
    unit_cost = Column(Numeric(10, 4), nullable=False, default=0)
    selling_price = Column(Numeric(10, 2), nullable=False)
    min_stock_level = Column(Integer, nullable=False, default=0)
    max_waste_percent = Column(Float, nullable=False, default=5.0)
    batch_yield = Column(Integer, nullable=False, default=1)  # units produced per recipe batch

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    recipes = relationship("Recipe", back_populates="product", cascade="all, delete-orphan")
    stock_entries = relationship("StockEntry", back_populates="product", cascade="all, delete-orphan")
    deliveries = relationship("Delivery", back_populates="product", cascade="all, delete-orphan")
    sales = relationship("Sale", back_populates="product", cascade="all, delete-orphan")
    ledger_entries = relationship("InventoryLedgerEntry", back_populates="product", cascade="all, delete-orphan")
    inventory_levels = relationship("InventoryLevel", back_populates="product", cascade="all, delete-orphan")
    predetermined_deliveries = relationship(
        "PredeterminedDelivery", back_populates="product", cascade="all, delete-orphan"
    )


class Recipe(Base):
    """One recipe line: quantity of an ingredient needed for a product batch."""
    __tablename__ = "recipes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Uuid, ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Numeric(10, 4), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    product = relationship("Product", back_populates="recipes")
    ingredient = relationship("Ingredient", back_populates="recipes")
