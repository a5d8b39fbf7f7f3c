"""
Stock entry, delivery, sale and production Pydantic schemas.
"""
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StockEntryCreate(BaseModel):
    """A staff stock count. Blank counts are filled with 0 by the client, not here."""
    date: date_type
    product_id: UUID
    store_id: UUID
    delivered: int = Field(default=0, ge=0)
    reported_stock: int = Field(default=0, ge=0)
    waste: int = Field(default=0, ge=0)
    sales: int = Field(default=0, ge=0)


class StockEntryUpdate(BaseModel):
    delivered: Optional[int] = Field(default=None, ge=0)
    reported_stock: Optional[int] = Field(default=None, ge=0)
    waste: Optional[int] = Field(default=None, ge=0)
    sales: Optional[int] = Field(default=None, ge=0)


class StockEntryResponse(BaseModel):
    id: UUID
    date: date_type
    product_id: UUID
    store_id: UUID
    delivered: int
    reported_stock: int
    waste: int
    sales: int
    expected_stock: int
    reported_remaining: int
    discrepancy: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StockEntryBatchItem(BaseModel):
    """
    One item of a bulk submission. Counts and selections are checked per
    item by the service so one bad row does not reject the whole batch.
    """
    date: Optional[date_type] = None
    product_id: Optional[UUID] = None
    store_id: Optional[UUID] = None
    delivered: int = 0
    reported_stock: int = 0
    waste: int = 0
    sales: int = 0


class StockEntryBatchRequest(BaseModel):
    entries: List[StockEntryBatchItem]
    all_or_nothing: bool = False


class StockEntryBatchFailure(BaseModel):
    index: int
    error: str
    message: str


class StockEntryBatchResponse(BaseModel):
    created: List[StockEntryResponse]
    failed: List[StockEntryBatchFailure]


class WasteCheckResponse(BaseModel):
    entry_id: UUID
    waste: int
    reported_stock: int
    waste_percent: float
    max_waste_percent: float
    excessive: bool


class DeliveryCreate(BaseModel):
    date: date_type
    store_id: UUID
    product_id: UUID
    quantity_sent: int = Field(default=0, ge=0)


class DeliveryResponse(BaseModel):
    id: UUID
    date: date_type
    store_id: UUID
    product_id: UUID
    quantity_sent: int

    model_config = ConfigDict(from_attributes=True)


class DeliveryUpdate(BaseModel):
    date: Optional[date_type] = None
    store_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    quantity_sent: Optional[int] = Field(default=None, ge=0)


class PredeterminedDeliveryCreate(BaseModel):
    store_id: UUID
    product_id: UUID
    default_quantity: int = Field(default=0, ge=0)
    frequency: Optional[str] = None


class PredeterminedDeliveryResponse(BaseModel):
    id: UUID
    store_id: UUID
    store_name: Optional[str] = None
    product_id: UUID
    product_code: Optional[str] = None
    product_name: Optional[str] = None
    default_quantity: int
    frequency: str

    model_config = ConfigDict(from_attributes=True)


class PredeterminedApplyRequest(BaseModel):
    """Quantities override the standing order per product id."""
    date: date_type
    store_id: UUID
    quantities: Optional[Dict[UUID, int]] = None


class SaleCreate(BaseModel):
    date: date_type
    store_id: UUID
    product_id: UUID
    quantity: int = Field(default=0, ge=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    source: str = "manual"


class SaleResponse(BaseModel):
    id: UUID
    date: date_type
    store_id: UUID
    product_id: UUID
    quantity: int
    unit_price: Optional[Decimal] = None
    source: str

    model_config = ConfigDict(from_attributes=True)


class ProductionCreate(BaseModel):
    date: date_type
    product_id: UUID
    quantity_produced: int = Field(gt=0)
    notes: Optional[str] = None


class InventoryAdjustment(BaseModel):
    product_id: UUID
    delta: int
    reason: Optional[str] = None
    store_id: Optional[UUID] = None


class LedgerEntryResponse(BaseModel):
    id: UUID
    date: date_type
    product_id: UUID
    store_id: UUID
    movement_type: str
    quantity_produced: int
    quantity_change: int
    quantity_in_stock: int
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
