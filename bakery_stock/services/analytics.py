"""
Analytics over stock entries, sales, deliveries and the inventory ledger.

All reads accept an optional store_id scope. Restricting staff to their
own store is the caller's job: it passes the store in, the service does
not know about roles.
"""
import math
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from bakery_stock.core.config import get_settings
from bakery_stock.core.exceptions import NotFoundError
from bakery_stock.models.product import Product
from bakery_stock.models.stock import Delivery, Sale, StockEntry
from bakery_stock.models.store import DeliverySchedule, Store
from bakery_stock.services.inventory_ledger import InventoryLedger


@dataclass
class LowStockProduct:
    product: Product
    current_stock: int


@dataclass
class DiscrepancyAlert:
    entry: StockEntry
    product_name: str
    store_name: str


@dataclass
class ProductDemand:
    product_id: UUID
    code: str
    name: str
    current_stock: int
    weekly_sales: int
    weekly_deliveries: int
    weekly_demand: int
    suggested_production: int
    stock_level: str  # good, medium, low


@dataclass
class InventoryDashboard:
    as_of: date
    products: List[ProductDemand]
    low_stock_count: int
    inventory_value: Decimal


@dataclass
class DeliveryForecast:
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


@dataclass
class SalesChannelMismatch:
    date: date
    store_id: UUID
    product_id: UUID
    recorded_sales: int  # sum of Sale.quantity
    stock_entry_sales: int  # StockEntry.sales
    difference: int  # recorded_sales - stock_entry_sales


def classify_stock_level(current_stock: int, weekly_demand: int, coverage_weeks: int = 2) -> str:
    if current_stock >= weekly_demand * coverage_weeks:
        return "good"
    if current_stock >= weekly_demand:
        return "medium"
    return "low"


def deliveries_in_period(schedule: str, days: int) -> int:
    if schedule == DeliverySchedule.EVERY_2_DAYS.value:
        return math.ceil(days / 2)
    if schedule == DeliverySchedule.EVERY_3_DAYS.value:
        return math.ceil(days / 3)
    return days


class AnalyticsService:

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.ledger = InventoryLedger(db)

    def products_with_low_stock(self, store_id: Optional[UUID] = None) -> List[LowStockProduct]:
        """
        Products whose highest counted stock is below min_stock_level.

        The maximum reported_stock across a product's stock entries stands
        in for current stock. Products never counted are not reported.
        """
        stmt = (
            select(StockEntry.product_id, func.max(StockEntry.reported_stock).label("current_stock"))
            .group_by(StockEntry.product_id)
        )
        if store_id:
            stmt = stmt.where(StockEntry.store_id == store_id)

        results = []
        for row in self.db.execute(stmt).all():
            product = self.db.get(Product, row.product_id)
            if product and row.current_stock < product.min_stock_level:
                results.append(LowStockProduct(product=product, current_stock=row.current_stock))

        results.sort(key=lambda r: r.product.name)
        return results

    def stock_discrepancies(
        self,
        threshold: Optional[float] = None,
        limit: Optional[int] = None,
        store_id: Optional[UUID] = None,
    ) -> List[DiscrepancyAlert]:
        """
        Recent entries whose |discrepancy| >= threshold percent.

        Only the latest `limit` entries are scanned; this is an alert feed
        for recent counts, not an audit of the full history.
        """
        if threshold is None:
            threshold = self.settings.DISCREPANCY_THRESHOLD_PERCENT
        if limit is None:
            limit = self.settings.DISCREPANCY_SCAN_LIMIT

        stmt = (
            select(StockEntry, Product.name, Store.name)
            .join(Product, StockEntry.product_id == Product.id)
            .join(Store, StockEntry.store_id == Store.id)
        )
        if store_id:
            stmt = stmt.where(StockEntry.store_id == store_id)

        rows = self.db.execute(
            stmt.order_by(StockEntry.date.desc(), StockEntry.created_at.desc()).limit(limit)
        ).all()

        return [
            DiscrepancyAlert(entry=entry, product_name=product_name, store_name=store_name)
            for entry, product_name, store_name in rows
            if abs(entry.discrepancy) >= threshold
        ]

    def _sum_by_product(self, column, date_column, product_column, start: date, end: date) -> dict:
        """Sum `column` per product for dates in (start, end]."""
        stmt = (
            select(product_column, func.coalesce(func.sum(column), 0))
            .where(date_column > start, date_column <= end)
            .group_by(product_column)
        )
        return {product_id: int(total) for product_id, total in self.db.execute(stmt).all()}

    def inventory_dashboard(self, as_of: Optional[date] = None) -> InventoryDashboard:
        """
        Weekly demand and suggested production per product.

        weekly_demand = sales + deliveries over the trailing window;
        production aims to hold TARGET_COVERAGE_WEEKS of demand at the
        production center.
        """
        as_of = as_of or date.today()
        window_start = as_of - timedelta(days=self.settings.FORECAST_WINDOW_DAYS)
        coverage = self.settings.TARGET_COVERAGE_WEEKS

        weekly_sales = self._sum_by_product(Sale.quantity, Sale.date, Sale.product_id, window_start, as_of)
        weekly_deliveries = self._sum_by_product(
            Delivery.quantity_sent, Delivery.date, Delivery.product_id, window_start, as_of
        )
        levels = self.ledger.get_current_inventory_levels()

        products = self.db.execute(select(Product).order_by(Product.name)).scalars().all()

        items = []
        inventory_value = Decimal(0)
        for product in products:
            current_stock = levels.get(product.id, 0)
            sales = weekly_sales.get(product.id, 0)
            deliveries = weekly_deliveries.get(product.id, 0)
            demand = sales + deliveries
            target_stock = demand * coverage

            items.append(ProductDemand(
                product_id=product.id,
                code=product.code,
                name=product.name,
                current_stock=current_stock,
                weekly_sales=sales,
                weekly_deliveries=deliveries,
                weekly_demand=demand,
                suggested_production=max(0, target_stock - current_stock),
                stock_level=classify_stock_level(current_stock, demand, coverage),
            ))
            inventory_value += Decimal(product.unit_cost or 0) * current_stock

        return InventoryDashboard(
            as_of=as_of,
            products=items,
            low_stock_count=sum(1 for i in items if i.stock_level == "low"),
            inventory_value=inventory_value,
        )

    def delivery_forecast(self, store_id: UUID, product_id: UUID, days: int = 7) -> DeliveryForecast:
        """
        Recommend delivery quantities from a store's sales history.

        Averages sales and waste over stock entries that recorded sales,
        projects them over `days`, and splits the total across the
        deliveries the store's schedule allows in that period.
        """
        store = self.db.get(Store, store_id)
        if not store:
            raise NotFoundError("Store", store_id)
        if not self.db.get(Product, product_id):
            raise NotFoundError("Product", product_id)

        entries = self.db.execute(
            select(StockEntry.sales, StockEntry.waste)
            .where(
                StockEntry.store_id == store_id,
                StockEntry.product_id == product_id,
                StockEntry.sales > 0,
            )
        ).all()
        if not entries:
            raise NotFoundError("Sales history for this store and product")

        avg_sales = sum(e.sales for e in entries) / len(entries)
        avg_waste = sum(e.waste for e in entries) / len(entries)
        forecasted_sales = avg_sales * days
        forecasted_waste = avg_waste * days
        recommended = math.ceil(forecasted_sales + forecasted_waste)

        schedule = store.delivery_schedule or DeliverySchedule.DAILY.value
        delivery_count = deliveries_in_period(schedule, days)

        return DeliveryForecast(
            store_id=store_id,
            product_id=product_id,
            avg_daily_sales=avg_sales,
            avg_daily_waste=avg_waste,
            forecast_period=days,
            total_forecasted_sales=forecasted_sales,
            total_forecasted_waste=forecasted_waste,
            recommended_delivery=recommended,
            delivery_frequency=schedule,
            delivery_count=delivery_count,
            per_delivery_quantity=math.ceil(recommended / delivery_count) if delivery_count else 0,
            data_points=len(entries),
        )

    def compare_sales_channels(
        self,
        entry_date: Optional[date] = None,
        store_id: Optional[UUID] = None,
    ) -> List[SalesChannelMismatch]:
        """
        Compare Sale records with the sales typed into stock entries.

        Only (date, store, product) keys where the two disagree are
        returned. Nothing is written back.
        """
        sale_stmt = (
            select(Sale.date, Sale.store_id, Sale.product_id, func.sum(Sale.quantity))
            .group_by(Sale.date, Sale.store_id, Sale.product_id)
        )
        entry_stmt = select(StockEntry.date, StockEntry.store_id, StockEntry.product_id, StockEntry.sales)
        if entry_date:
            sale_stmt = sale_stmt.where(Sale.date == entry_date)
            entry_stmt = entry_stmt.where(StockEntry.date == entry_date)
        if store_id:
            sale_stmt = sale_stmt.where(Sale.store_id == store_id)
            entry_stmt = entry_stmt.where(StockEntry.store_id == store_id)

        recorded = {(d, s, p): int(q or 0) for d, s, p, q in self.db.execute(sale_stmt).all()}
        counted = {(d, s, p): int(q or 0) for d, s, p, q in self.db.execute(entry_stmt).all()}

        mismatches = []
        for key in set(recorded) | set(counted):
            recorded_sales = recorded.get(key, 0)
            entry_sales = counted.get(key, 0)
            if recorded_sales != entry_sales:
                d, s, p = key
                mismatches.append(SalesChannelMismatch(
                    date=d,
                    store_id=s,
                    product_id=p,
                    recorded_sales=recorded_sales,
                    stock_entry_sales=entry_sales,
                    difference=recorded_sales - entry_sales,
                ))

        mismatches.sort(key=lambda m: (m.date, str(m.store_id), str(m.product_id)), reverse=True)
        return mismatches
