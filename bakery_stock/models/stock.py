"""
Store-level stock counts, deliveries and sales.
"""
import uuid
from sqlalchemy import (
    Column, String, Integer, Float, Numeric, Date, DateTime, ForeignKey, Uuid, func,
    UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship

from bakery_stock.db.base import Base


class StockEntry(Base):
    """
    End-of-period stock count for one product at one store.

    expected_stock and discrepancy are computed by the reconciliation
    service; reported_remaining keeps the count as first submitted.
    Entries are never deleted so the counts remain auditable.
    """
    __tablename__ = "stock_entries"
    __table_args__ = (
        UniqueConstraint("date", "product_id", "store_id", name="uq_stock_entry_date_product_store"),
        Index("idx_stock_entries_product_store_date", "product_id", "store_id", "date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)

    delivered = Column(Integer, nullable=False, default=0)
    reported_stock = Column(Integer, nullable=False, default=0)  # staff-counted physical stock
    waste = Column(Integer, nullable=False, default=0)
    sales = Column(Integer, nullable=False, default=0)

    expected_stock = Column(Integer, nullable=False, default=0)
    reported_remaining = Column(Integer, nullable=False, default=0)
    discrepancy = Column(Float, nullable=False, default=0.0)  # percent of inventory base

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="stock_entries")
    store = relationship("Store", back_populates="stock_entries")


class Delivery(Base):
    """Products sent from the production center to a store."""
    __tablename__ = "deliveries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity_sent = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

    store = relationship("Store", back_populates="deliveries")
    product = relationship("Product", back_populates="deliveries")


class Sale(Base):
    """
    A recorded sale. Independent of StockEntry.sales; the two channels
    are compared by the sales reconciliation report, never merged.
    """
    __tablename__ = "sales"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    unit_price = Column(Numeric(10, 2))
    source = Column(String(50), nullable=False, default="manual")  # 'manual', 'pos_import'
    created_at = Column(DateTime, server_default=func.now())

    store = relationship("Store", back_populates="sales")
    product = relationship("Product", back_populates="sales")


class PredeterminedDelivery(Base):
    """Standing order: the default quantity a store receives of a product."""
    __tablename__ = "predetermined_deliveries"
    __table_args__ = (
        UniqueConstraint("store_id", "product_id", name="uq_predetermined_delivery_store_product"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    default_quantity = Column(Integer, nullable=False, default=0)
    frequency = Column(String(20), nullable=False, default="daily")  # DeliverySchedule value
    created_at = Column(DateTime, server_default=func.now())

    store = relationship("Store", back_populates="predetermined_deliveries")
    product = relationship("Product", back_populates="predetermined_deliveries")
