import uuid
from enum import Enum

from sqlalchemy import Column, String, DateTime, Uuid, func
from sqlalchemy.orm import relationship

from bakery_stock.db.base import Base


class DeliverySchedule(str, Enum):
    """How often a retail store receives deliveries."""
    DAILY = "daily"
    EVERY_2_DAYS = "every-2-days"
    EVERY_3_DAYS = "every-3-days"


class Store(Base):
    """
    A retail store, or the production center.

    The production center is the store whose name matches
    PRODUCTION_CENTER_STORE_NAME; there is no flag column for it.
    """
    __tablename__ = "stores"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    delivery_schedule = Column(String(20), nullable=False, default=DeliverySchedule.DAILY.value)
    created_at = Column(DateTime, server_default=func.now())

    stock_entries = relationship("StockEntry", back_populates="store", cascade="all, delete-orphan")
    deliveries = relationship("Delivery", back_populates="store", cascade="all, delete-orphan")
    sales = relationship("Sale", back_populates="store", cascade="all, delete-orphan")
    predetermined_deliveries = relationship(
        "PredeterminedDelivery", back_populates="store", cascade="all, delete-orphan"
    )
