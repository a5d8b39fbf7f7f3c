"""
Stock reconciliation engine.

For a stock entry (date, product, store):

    previous  = reported_stock of the latest entry strictly before date (0 if none)
    expected  = previous + delivered - waste - sales
    base      = previous + delivered
    discrepancy % = (reported_stock - expected) / base * 100   (0 when base <= 0)

Positive discrepancy: more stock counted than expected (unrecorded
delivery or miscount). Negative: less than expected (unrecorded waste,
theft or oversale). The percentage is returned unrounded.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bakery_stock.core.exceptions import ConflictError, NotFoundError, StockError, ValidationError
from bakery_stock.models.product import Product
from bakery_stock.models.stock import StockEntry
from bakery_stock.models.store import Store

logger = logging.getLogger(__name__)

COUNT_FIELDS = ("delivered", "reported_stock", "waste", "sales")


@dataclass
class ReconciliationResult:
    previous_reported_stock: int
    expected_stock: int
    inventory_base: int
    discrepancy: float


def compute_expected_and_discrepancy(
    previous_reported_stock: int,
    delivered: int,
    waste: int,
    sales: int,
    reported_stock: int,
) -> ReconciliationResult:
    expected_stock = previous_reported_stock + delivered - waste - sales
    inventory_base = previous_reported_stock + delivered
    if inventory_base > 0:
        discrepancy = (reported_stock - expected_stock) / inventory_base * 100
    else:
        discrepancy = 0.0

    return ReconciliationResult(
        previous_reported_stock=previous_reported_stock,
        expected_stock=expected_stock,
        inventory_base=inventory_base,
        discrepancy=float(discrepancy),
    )


def waste_percentage(waste: int, reported_stock: int) -> float:
    total = waste + reported_stock
    return waste / total * 100 if total > 0 else 0.0


def is_excessive_waste(waste: int, reported_stock: int, max_waste_percent: float) -> bool:
    """
    Day-of waste heuristic: waste as a share of (waste + counted stock).

    Deliveries and sales may not be known at entry time, so this uses a
    looser base than the discrepancy formula. Zero waste is never excessive.
    """
    if waste <= 0:
        return False
    return waste_percentage(waste, reported_stock) > max_waste_percent


@dataclass
class WasteCheck:
    entry_id: UUID
    waste: int
    reported_stock: int
    waste_percent: float
    max_waste_percent: float
    excessive: bool


@dataclass
class BatchFailure:
    index: int
    error: str
    message: str


@dataclass
class BatchResult:
    created: list[StockEntry] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)


class StockReconciliationService:
    """Creates and updates stock entries with expected stock and discrepancy filled in."""

    def __init__(self, db: Session):
        self.db = db

    def previous_reported_stock(self, entry_date: date, product_id: UUID, store_id: UUID) -> int:
        previous = self.db.execute(
            select(StockEntry.reported_stock)
            .where(
                StockEntry.product_id == product_id,
                StockEntry.store_id == store_id,
                StockEntry.date < entry_date,
            )
            .order_by(StockEntry.date.desc())
            .limit(1)
        ).scalar_one_or_none()
        return previous or 0

    def reconcile(self, entry: StockEntry) -> ReconciliationResult:
        """Recompute expected_stock and discrepancy in place, anchored on the entry's own date."""
        previous = self.previous_reported_stock(entry.date, entry.product_id, entry.store_id)
        result = compute_expected_and_discrepancy(
            previous,
            entry.delivered or 0,
            entry.waste or 0,
            entry.sales or 0,
            entry.reported_stock or 0,
        )
        entry.expected_stock = result.expected_stock
        entry.discrepancy = result.discrepancy
        return result

    def _validate_counts(self, values: dict[str, Any]) -> None:
        for name in COUNT_FIELDS:
            value = values.get(name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{name} must be an integer", field=name)
            if value < 0:
                raise ValidationError(f"{name} cannot be negative", field=name)

    def _require_references(self, product_id: UUID, store_id: UUID) -> None:
        if product_id is None:
            raise ValidationError("A product must be selected", field="product_id")
        if store_id is None:
            raise ValidationError("A store must be selected", field="store_id")
        if not self.db.get(Product, product_id):
            raise NotFoundError("Product", product_id)
        if not self.db.get(Store, store_id):
            raise NotFoundError("Store", store_id)

    def find_entry(self, entry_date: date, product_id: UUID, store_id: UUID) -> Optional[StockEntry]:
        return self.db.execute(
            select(StockEntry).where(
                StockEntry.date == entry_date,
                StockEntry.product_id == product_id,
                StockEntry.store_id == store_id,
            )
        ).scalar_one_or_none()

    def build_entry(
        self,
        entry_date: date,
        product_id: UUID,
        store_id: UUID,
        delivered: int = 0,
        reported_stock: int = 0,
        waste: int = 0,
        sales: int = 0,
    ) -> StockEntry:
        """Validate, reconcile and add a new entry to the session (flushes, no commit)."""
        if entry_date is None:
            raise ValidationError("A date is required", field="date")
        self._require_references(product_id, store_id)
        counts = {
            "delivered": delivered,
            "reported_stock": reported_stock,
            "waste": waste,
            "sales": sales,
        }
        for name, value in counts.items():
            if value is None:
                raise ValidationError(f"{name} is required", field=name)
        self._validate_counts(counts)

        entry = StockEntry(
            date=entry_date,
            product_id=product_id,
            store_id=store_id,
            delivered=delivered,
            reported_stock=reported_stock,
            waste=waste,
            sales=sales,
            reported_remaining=reported_stock,
        )
        self.reconcile(entry)
        self.db.add(entry)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"A stock entry already exists for {entry_date} at this store for this product; "
                f"update the existing entry instead"
            ) from e
        return entry

    def create_stock_entry(
        self,
        entry_date: date,
        product_id: UUID,
        store_id: UUID,
        delivered: int = 0,
        reported_stock: int = 0,
        waste: int = 0,
        sales: int = 0,
    ) -> StockEntry:
        """
        Create a stock entry, rejecting duplicates.

        Uniqueness is enforced by the database constraint on
        (date, product_id, store_id), so two concurrent submissions cannot
        both succeed: the loser gets a ConflictError and nothing is written.
        """
        try:
            entry = self.build_entry(
                entry_date, product_id, store_id,
                delivered=delivered, reported_stock=reported_stock, waste=waste, sales=sales,
            )
            self.db.commit()
        except ConflictError:
            self.db.rollback()
            logger.warning(f"Duplicate stock entry rejected: date={entry_date} product={product_id} store={store_id}")
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(entry)
        logger.info(
            f"Created stock entry {entry.id}: expected={entry.expected_stock} "
            f"reported={entry.reported_stock} discrepancy={entry.discrepancy:.2f}%"
        )
        return entry

    def update_stock_entry(self, entry_id: UUID, fields: dict[str, Any]) -> StockEntry:
        """
        Merge count fields into an existing entry and reconcile again.

        The entry keeps its date, product and store, so the same previous
        count is used; reported_remaining keeps the originally submitted count.
        """
        entry = self.db.get(StockEntry, entry_id)
        if not entry:
            raise NotFoundError("Stock entry", entry_id)

        changes = {name: value for name, value in fields.items() if name in COUNT_FIELDS and value is not None}
        self._validate_counts(changes)

        for name, value in changes.items():
            setattr(entry, name, value)
        self.reconcile(entry)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(entry)
        logger.info(f"Updated stock entry {entry.id} ({', '.join(sorted(changes)) or 'no changes'})")
        return entry

    def submit_stock_entries(self, entries: list[dict[str, Any]], all_or_nothing: bool = False) -> BatchResult:
        """
        Create many entries at once.

        By default each item commits on its own and failures are reported
        per index without undoing the successful items. With
        all_or_nothing, the first failure rolls back the whole batch and
        is raised.
        """
        result = BatchResult()

        for index, data in enumerate(entries):
            try:
                entry = self.build_entry(
                    data.get("date"),
                    data.get("product_id"),
                    data.get("store_id"),
                    delivered=data.get("delivered", 0),
                    reported_stock=data.get("reported_stock", 0),
                    waste=data.get("waste", 0),
                    sales=data.get("sales", 0),
                )
                if not all_or_nothing:
                    self.db.commit()
                result.created.append(entry)
            except StockError as e:
                self.db.rollback()
                if all_or_nothing:
                    raise
                result.failed.append(BatchFailure(index=index, error=e.kind, message=e.message))
            except Exception:
                self.db.rollback()
                raise

        if all_or_nothing:
            self.db.commit()

        for entry in result.created:
            self.db.refresh(entry)

        logger.info(f"Stock entry batch: {len(result.created)} created, {len(result.failed)} failed")
        return result

    def waste_check(self, entry_id: UUID) -> WasteCheck:
        entry = self.db.get(StockEntry, entry_id)
        if not entry:
            raise NotFoundError("Stock entry", entry_id)

        product = self.db.get(Product, entry.product_id)
        max_waste = product.max_waste_percent if product.max_waste_percent is not None else 5.0

        return WasteCheck(
            entry_id=entry.id,
            waste=entry.waste,
            reported_stock=entry.reported_stock,
            waste_percent=waste_percentage(entry.waste, entry.reported_stock),
            max_waste_percent=max_waste,
            excessive=is_excessive_waste(entry.waste, entry.reported_stock, max_waste),
        )

    def list_entries(
        self,
        entry_date: Optional[date] = None,
        store_id: Optional[UUID] = None,
        product_id: Optional[UUID] = None,
        limit: int = 500,
    ) -> list[StockEntry]:
        query = select(StockEntry)
        if entry_date:
            query = query.where(StockEntry.date == entry_date)
        if store_id:
            query = query.where(StockEntry.store_id == store_id)
        if product_id:
            query = query.where(StockEntry.product_id == product_id)

        return list(self.db.execute(
            query.order_by(StockEntry.date.desc(), StockEntry.created_at.desc()).limit(limit)
        ).scalars().all())
