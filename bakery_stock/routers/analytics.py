"""
Analytics router: alerts, forecasts and reconciliation reports.

Provides API endpoints for:
- Low stock alerts
- Stock discrepancy feed
- Inventory dashboard (weekly demand, suggested production)
- Delivery forecast per store and product
- Sales channel comparison
- Product profitability
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bakery_stock.db.session import get_db
from bakery_stock.schemas.catalog import ProductResponse
from bakery_stock.schemas.stock import StockEntryResponse
from bakery_stock.services.analytics import AnalyticsService
from bakery_stock.services.cost_engine import CostEngine


router = APIRouter(prefix="/analytics", tags=["analytics"])


# ============ Schemas ============

class LowStockResponse(ProductResponse):
    current_stock: int


class DiscrepancyResponse(StockEntryResponse):
    product_name: str
    store_name: str


class ProductDemandResponse(BaseModel):
    product_id: UUID
    code: str
    name: str
    current_stock: int
    weekly_sales: int
    weekly_deliveries: int
    weekly_demand: int
    suggested_production: int
    stock_level: str


class InventoryDashboardResponse(BaseModel):
    as_of: date
    products: List[ProductDemandResponse]
    low_stock_count: int
    inventory_value: Decimal


class DeliveryForecastResponse(BaseModel):
    store_id: UUID
    product_id: UUID
    avg_daily_sales: float
    avg_daily_waste: float
    forecast_period: int
    total_forecasted_sales: float
    total_forecasted_waste: float
    recommended_delivery: int
    delivery_frequency: str
    delivery_count: int
    per_delivery_quantity: int
    data_points: int


class SalesChannelMismatchResponse(BaseModel):
    date: date
    store_id: UUID
    product_id: UUID
    recorded_sales: int
    stock_entry_sales: int
    difference: int


class ProfitabilityItem(BaseModel):
    product_id: UUID
    code: str
    name: str
    unit_cost: Decimal
    selling_price: Decimal
    margin: Decimal
    margin_percentage: Decimal


class ProfitabilityResponse(BaseModel):
    items: List[ProfitabilityItem]
    average_margin: Decimal


# ============ Endpoints ============

@router.get("/low-stock", response_model=List[LowStockResponse])
def low_stock(store_id: Optional[UUID] = None, db: Session = Depends(get_db)):
    results = AnalyticsService(db).products_with_low_stock(store_id)
    return [
        LowStockResponse(
            **ProductResponse.model_validate(r.product).model_dump(),
            current_stock=r.current_stock,
        )
        for r in results
    ]


@router.get("/discrepancies", response_model=List[DiscrepancyResponse])
def discrepancies(
    threshold: Optional[float] = Query(default=None, ge=0),
    store_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    """Recent stock entries whose discrepancy magnitude reaches the threshold (percent)."""
    alerts = AnalyticsService(db).stock_discrepancies(threshold=threshold, store_id=store_id)
    return [
        DiscrepancyResponse(
            **StockEntryResponse.model_validate(a.entry).model_dump(),
            product_name=a.product_name,
            store_name=a.store_name,
        )
        for a in alerts
    ]


@router.get("/inventory-dashboard", response_model=InventoryDashboardResponse)
def inventory_dashboard(as_of: Optional[date] = None, db: Session = Depends(get_db)):
    return AnalyticsService(db).inventory_dashboard(as_of)


@router.get("/delivery-forecast", response_model=DeliveryForecastResponse)
def delivery_forecast(
    store_id: UUID,
    product_id: UUID,
    days: int = Query(default=7, ge=1, le=90),
    db: Session = Depends(get_db),
):
    return AnalyticsService(db).delivery_forecast(store_id, product_id, days)


@router.get("/sales-reconciliation", response_model=List[SalesChannelMismatchResponse])
def sales_reconciliation(
    date: Optional[date] = None,
    store_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    """Where recorded sales and stock entry sales disagree."""
    return AnalyticsService(db).compare_sales_channels(date, store_id)


@router.get("/profitability", response_model=ProfitabilityResponse)
def profitability(db: Session = Depends(get_db)):
    """Per-unit margin for every product, lowest margin first."""
    results = CostEngine(db).product_profitability()
    if not results:
        return ProfitabilityResponse(items=[], average_margin=Decimal(0))

    average = sum(r.margin_percentage for r in results) / len(results)
    return ProfitabilityResponse(
        items=[ProfitabilityItem(**r.__dict__) for r in results],
        average_margin=average,
    )
