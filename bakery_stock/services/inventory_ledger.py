"""
Inventory ledger service.

Every inventory change appends an InventoryLedgerEntry and updates the
InventoryLevel counter for the same (product, store) in one transaction.
The counter row is locked (SELECT ... FOR UPDATE) before it is read, so
two concurrent deliveries cannot both pass the non-negative check
against a stale total.
"""
import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bakery_stock.core.config import get_settings
from bakery_stock.core.exceptions import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from bakery_stock.models.inventory import InventoryLedgerEntry, InventoryLevel, MovementType
from bakery_stock.models.product import Product
from bakery_stock.models.store import Store

logger = logging.getLogger(__name__)


class InventoryLedger:
    """
    Per-product running stock at the production center and at stores.

    `apply_delta` flushes without committing so it can take part in a
    larger operation (a delivery); `record_production` and
    `update_inventory_stock` are complete operations and commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def production_center_id(self) -> UUID:
        store_id = self.db.execute(
            select(Store.id).where(Store.name == self.settings.PRODUCTION_CENTER_STORE_NAME)
        ).scalar_one_or_none()
        if store_id is None:
            raise NotFoundError(f"Production center store ({self.settings.PRODUCTION_CENTER_STORE_NAME})")
        return store_id

    def _resolve_store(self, store_id: Optional[UUID]) -> UUID:
        """An explicit store must exist; None means the production center."""
        if store_id is None:
            return self.production_center_id()
        if not self.db.get(Store, store_id):
            raise NotFoundError("Store", store_id)
        return store_id

    def _locked_level(self, product_id: UUID, store_id: UUID) -> InventoryLevel:
        level = self.db.execute(
            select(InventoryLevel)
            .where(InventoryLevel.product_id == product_id, InventoryLevel.store_id == store_id)
            .with_for_update()
        ).scalar_one_or_none()
        if level:
            return level

        level = InventoryLevel(product_id=product_id, store_id=store_id, quantity=0)
        self.db.add(level)
        try:
            self.db.flush()
        except IntegrityError as e:
            # Another transaction created the counter first; the caller rolls back.
            raise ConflictError(
                f"Concurrent inventory update for product {product_id}, please retry"
            ) from e
        return level

    def apply_delta(
        self,
        product_id: UUID,
        delta: int,
        reason: Optional[str] = None,
        store_id: Optional[UUID] = None,
        movement_type: MovementType = MovementType.ADJUSTMENT,
        entry_date: Optional[date] = None,
        quantity_produced: int = 0,
    ) -> InventoryLedgerEntry:
        """
        Add `delta` to the running total of (product, store).

        store_id defaults to the production center. Raises
        InsufficientStockError, leaving the ledger untouched, when the
        result would be negative.
        """
        product = self.db.get(Product, product_id)
        if not product:
            raise NotFoundError("Product", product_id)

        target_store_id = self._resolve_store(store_id)
        level = self._locked_level(product_id, target_store_id)
        current = level.quantity or 0
        new_total = current + delta

        if new_total < 0:
            logger.warning(
                f"Rejected inventory change for {product.code}: available={current} delta={delta}"
            )
            raise InsufficientStockError(product.name, available=current, requested=abs(delta))

        level.quantity = new_total
        entry = InventoryLedgerEntry(
            date=entry_date or date.today(),
            product_id=product_id,
            store_id=target_store_id,
            movement_type=movement_type.value,
            quantity_produced=quantity_produced,
            quantity_change=delta,
            quantity_in_stock=new_total,
            notes=reason or f"Inventory adjustment: {delta:+d}",
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def record_production(
        self,
        entry_date: date,
        product_id: UUID,
        quantity_produced: int,
        notes: Optional[str] = None,
    ) -> InventoryLedgerEntry:
        """Append a production event at the production center."""
        if quantity_produced is None or quantity_produced <= 0:
            raise ValidationError("quantity_produced must be a positive integer", field="quantity_produced")

        try:
            entry = self.apply_delta(
                product_id,
                quantity_produced,
                reason=notes or f"Production: +{quantity_produced}",
                movement_type=MovementType.PRODUCTION,
                entry_date=entry_date,
                quantity_produced=quantity_produced,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(entry)
        logger.info(
            f"Recorded production of {quantity_produced} for product {product_id}; "
            f"stock now {entry.quantity_in_stock}"
        )
        return entry

    def update_inventory_stock(
        self,
        product_id: UUID,
        delta: int,
        reason: Optional[str] = None,
        store_id: Optional[UUID] = None,
    ) -> InventoryLedgerEntry:
        """Apply a signed adjustment and commit it."""
        try:
            entry = self.apply_delta(product_id, delta, reason=reason, store_id=store_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(entry)
        return entry

    def current_stock(self, product_id: UUID, store_id: Optional[UUID] = None) -> int:
        target_store_id = self._resolve_store(store_id)
        quantity = self.db.execute(
            select(InventoryLevel.quantity)
            .where(InventoryLevel.product_id == product_id, InventoryLevel.store_id == target_store_id)
        ).scalar_one_or_none()
        return quantity or 0

    def get_current_inventory_levels(self, store_id: Optional[UUID] = None) -> dict[UUID, int]:
        """
        Map every product id to its current stock.

        Scoped to the production center when store_id is omitted.
        Products with no ledger history report 0.
        """
        target_store_id = self._resolve_store(store_id)

        levels = dict(self.db.execute(
            select(InventoryLevel.product_id, InventoryLevel.quantity)
            .where(InventoryLevel.store_id == target_store_id)
        ).all())

        product_ids = self.db.execute(select(Product.id)).scalars().all()
        return {product_id: levels.get(product_id, 0) for product_id in product_ids}

    def history(
        self,
        product_id: UUID,
        store_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> list[InventoryLedgerEntry]:
        query = select(InventoryLedgerEntry).where(InventoryLedgerEntry.product_id == product_id)
        if store_id:
            query = query.where(InventoryLedgerEntry.store_id == store_id)

        return list(self.db.execute(
            query.order_by(InventoryLedgerEntry.date.desc(), InventoryLedgerEntry.created_at.desc())
            .limit(limit)
        ).scalars().all())
