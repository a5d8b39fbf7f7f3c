"""
Inventory ledger models.
"""
import uuid
from enum import Enum

from sqlalchemy import Column, String, Text, Integer, Date, DateTime, ForeignKey, Uuid, func, UniqueConstraint
from sqlalchemy.orm import relationship

from bakery_stock.db.base import Base


class MovementType(str, Enum):
    PRODUCTION = "production"
    DELIVERY_OUT = "delivery_out"
    DELIVERY_IN = "delivery_in"
    DELIVERY_REVERSAL = "delivery_reversal"
    ADJUSTMENT = "adjustment"


class InventoryLedgerEntry(Base):
    """
    Append-only audit trail of inventory-affecting events.

    quantity_in_stock is the running total for (product, store) right
    after this event; quantity_change is the signed delta it applied.
    """
    __tablename__ = "inventory"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    movement_type = Column(String(50), nullable=False)
    quantity_produced = Column(Integer, nullable=False, default=0)
    quantity_change = Column(Integer, nullable=False)
    quantity_in_stock = Column(Integer, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    product = relationship("Product", back_populates="ledger_entries")
    store = relationship("Store")


class InventoryLevel(Base):
    """Materialized running total per (product, store), updated with every ledger row."""
    __tablename__ = "inventory_levels"
    __table_args__ = (
        UniqueConstraint("product_id", "store_id", name="uq_inventory_level_product_store"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="inventory_levels")
    store = relationship("Store")
