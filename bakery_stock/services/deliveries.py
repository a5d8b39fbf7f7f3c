"""
Delivery and sales recording.

A delivery with quantity_sent > 0 does, in one transaction:
1. debit the production center ledger (InsufficientStockError aborts everything)
2. credit the receiving store's ledger
3. add quantity_sent to the matching StockEntry.delivered, creating a
   zero-filled entry when none exists, and reconcile it again.

Correcting or removing a delivery reverses all three before applying the
new values, also in one transaction.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bakery_stock.core.exceptions import ConflictError, NotFoundError, ValidationError
from bakery_stock.models.inventory import MovementType
from bakery_stock.models.product import Product
from bakery_stock.models.stock import Delivery, PredeterminedDelivery, Sale
from bakery_stock.models.store import DeliverySchedule, Store
from bakery_stock.services.inventory_ledger import InventoryLedger
from bakery_stock.services.reconciliation import StockReconciliationService

logger = logging.getLogger(__name__)

DELIVERY_FIELDS = ("date", "store_id", "product_id", "quantity_sent")


@dataclass
class StandingOrder:
    id: UUID
    store_id: UUID
    store_name: str
    product_id: UUID
    product_code: str
    product_name: str
    default_quantity: int
    frequency: str


class DeliveryService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = InventoryLedger(db)
        self.reconciliation = StockReconciliationService(db)

    def _require(self, model, entity: str, entity_id: UUID):
        obj = self.db.get(model, entity_id)
        if not obj:
            raise NotFoundError(entity, entity_id)
        return obj

    def _require_retail_store(self, store_id: UUID) -> Store:
        store = self._require(Store, "Store", store_id)
        if store.name == self.ledger.settings.PRODUCTION_CENTER_STORE_NAME:
            raise ValidationError("Cannot deliver to the production center", field="store_id")
        return store

    def _validate_quantity(self, quantity: Optional[int], field: str = "quantity_sent") -> None:
        if quantity is None or quantity < 0:
            raise ValidationError(f"{field} cannot be negative", field=field)

    # ============ Ledger and stock entry effects ============

    def _apply(self, delivery_date: date, store: Store, product_id: UUID, quantity: int) -> None:
        if quantity <= 0:
            return
        self.ledger.apply_delta(
            product_id,
            -quantity,
            reason=f"Delivery to {store.name}: -{quantity}",
            movement_type=MovementType.DELIVERY_OUT,
            entry_date=delivery_date,
        )
        self.ledger.apply_delta(
            product_id,
            quantity,
            reason=f"Delivery received: +{quantity}",
            store_id=store.id,
            movement_type=MovementType.DELIVERY_IN,
            entry_date=delivery_date,
        )
        self._add_to_stock_entry(delivery_date, product_id, store.id, quantity)

    def _reverse(self, delivery: Delivery) -> None:
        """Undo the ledger moves and the StockEntry.delivered increment of a delivery."""
        quantity = delivery.quantity_sent or 0
        if quantity <= 0:
            return
        store = self._require(Store, "Store", delivery.store_id)
        self.ledger.apply_delta(
            delivery.product_id,
            quantity,
            reason=f"Delivery to {store.name} reversed: +{quantity}",
            movement_type=MovementType.DELIVERY_REVERSAL,
            entry_date=delivery.date,
        )
        self.ledger.apply_delta(
            delivery.product_id,
            -quantity,
            reason=f"Delivery reversed: -{quantity}",
            store_id=store.id,
            movement_type=MovementType.DELIVERY_REVERSAL,
            entry_date=delivery.date,
        )

        entry = self.reconciliation.find_entry(delivery.date, delivery.product_id, delivery.store_id)
        if entry is not None:
            entry.delivered = max(0, (entry.delivered or 0) - quantity)
            self.reconciliation.reconcile(entry)
            self.db.flush()

    def _add_to_stock_entry(self, entry_date: date, product_id: UUID, store_id: UUID, quantity: int) -> None:
        entry = self.reconciliation.find_entry(entry_date, product_id, store_id)
        if entry is None:
            self.reconciliation.build_entry(entry_date, product_id, store_id, delivered=quantity)
            return

        entry.delivered = (entry.delivered or 0) + quantity
        self.reconciliation.reconcile(entry)
        self.db.flush()

    # ============ Deliveries ============

    def create_delivery(
        self,
        delivery_date: date,
        store_id: UUID,
        product_id: UUID,
        quantity_sent: int,
    ) -> Delivery:
        self._validate_quantity(quantity_sent)

        try:
            store = self._require_retail_store(store_id)
            product = self._require(Product, "Product", product_id)

            self._apply(delivery_date, store, product_id, quantity_sent)
            delivery = Delivery(
                date=delivery_date,
                store_id=store_id,
                product_id=product_id,
                quantity_sent=quantity_sent,
            )
            self.db.add(delivery)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(delivery)
        logger.info(f"Delivered {quantity_sent} x {product.code} to {store.name} on {delivery_date}")
        return delivery

    def get_delivery(self, delivery_id: UUID) -> Delivery:
        return self._require(Delivery, "Delivery", delivery_id)

    def update_delivery(self, delivery_id: UUID, fields: dict[str, Any]) -> Delivery:
        """
        Correct a delivery: reverse its effects, then apply the merged values.

        If the new values cannot be applied (for example, not enough stock at
        the production center), nothing changes.
        """
        delivery = self.get_delivery(delivery_id)
        changes = {name: value for name, value in fields.items() if name in DELIVERY_FIELDS and value is not None}
        if "quantity_sent" in changes:
            self._validate_quantity(changes["quantity_sent"])

        try:
            store = self._require_retail_store(changes.get("store_id", delivery.store_id))
            self._require(Product, "Product", changes.get("product_id", delivery.product_id))

            self._reverse(delivery)
            for name, value in changes.items():
                setattr(delivery, name, value)
            self._apply(delivery.date, store, delivery.product_id, delivery.quantity_sent)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(delivery)
        logger.info(f"Updated delivery {delivery_id} ({', '.join(sorted(changes)) or 'no changes'})")
        return delivery

    def delete_delivery(self, delivery_id: UUID) -> None:
        delivery = self.get_delivery(delivery_id)
        try:
            self._reverse(delivery)
            self.db.delete(delivery)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Deleted delivery {delivery_id}")

    def list_deliveries(
        self,
        delivery_date: Optional[date] = None,
        store_id: Optional[UUID] = None,
    ) -> list[Delivery]:
        query = select(Delivery)
        if delivery_date:
            query = query.where(Delivery.date == delivery_date)
        if store_id:
            query = query.where(Delivery.store_id == store_id)
        return list(self.db.execute(
            query.order_by(Delivery.date.desc(), Delivery.created_at.desc())
        ).scalars().all())

    # ============ Standing orders ============

    def set_predetermined_delivery(
        self,
        store_id: UUID,
        product_id: UUID,
        default_quantity: int,
        frequency: Optional[str] = None,
    ) -> PredeterminedDelivery:
        """Create or replace the standing order for (store, product)."""
        self._validate_quantity(default_quantity, field="default_quantity")
        store = self._require_retail_store(store_id)
        self._require(Product, "Product", product_id)

        order = self.db.execute(
            select(PredeterminedDelivery).where(
                PredeterminedDelivery.store_id == store_id,
                PredeterminedDelivery.product_id == product_id,
            )
        ).scalar_one_or_none()
        if order is None:
            order = PredeterminedDelivery(store_id=store_id, product_id=product_id)
            self.db.add(order)

        order.default_quantity = default_quantity
        order.frequency = frequency or store.delivery_schedule or DeliverySchedule.DAILY.value

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("A standing order for this store and product already exists") from e
        self.db.refresh(order)
        return order

    def list_predetermined_deliveries(self, store_id: Optional[UUID] = None) -> list[StandingOrder]:
        stmt = (
            select(PredeterminedDelivery, Store.name, Product.code, Product.name)
            .join(Store, PredeterminedDelivery.store_id == Store.id)
            .join(Product, PredeterminedDelivery.product_id == Product.id)
        )
        if store_id:
            stmt = stmt.where(PredeterminedDelivery.store_id == store_id)

        return [
            StandingOrder(
                id=order.id,
                store_id=order.store_id,
                store_name=store_name,
                product_id=order.product_id,
                product_code=product_code,
                product_name=product_name,
                default_quantity=order.default_quantity,
                frequency=order.frequency,
            )
            for order, store_name, product_code, product_name in self.db.execute(
                stmt.order_by(Store.name, Product.name)
            ).all()
        ]

    def apply_predetermined_deliveries(
        self,
        delivery_date: date,
        store_id: UUID,
        quantities: Optional[dict[UUID, int]] = None,
    ) -> list[Delivery]:
        """
        Create one delivery per standing order of a store.

        `quantities` overrides the default quantity per product id; zero
        skips the product. All deliveries are applied or none are.
        """
        quantities = quantities or {}
        for quantity in quantities.values():
            self._validate_quantity(quantity)

        orders = self.db.execute(
            select(PredeterminedDelivery).where(PredeterminedDelivery.store_id == store_id)
        ).scalars().all()

        created = []
        try:
            store = self._require_retail_store(store_id)
            for order in orders:
                quantity = quantities.get(order.product_id, order.default_quantity)
                if not quantity:
                    continue
                self._apply(delivery_date, store, order.product_id, quantity)
                delivery = Delivery(
                    date=delivery_date,
                    store_id=store_id,
                    product_id=order.product_id,
                    quantity_sent=quantity,
                )
                self.db.add(delivery)
                created.append(delivery)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for delivery in created:
            self.db.refresh(delivery)
        logger.info(f"Applied {len(created)} standing order(s) for store {store_id} on {delivery_date}")
        return created

    # ============ Sales ============

    def record_sale(
        self,
        sale_date: date,
        store_id: UUID,
        product_id: UUID,
        quantity: int,
        unit_price: Optional[Decimal] = None,
        source: str = "manual",
    ) -> Sale:
        """Store a sale record. Stock entries are not touched."""
        self._validate_quantity(quantity, field="quantity")
        self._require(Store, "Store", store_id)
        self._require(Product, "Product", product_id)

        sale = Sale(
            date=sale_date,
            store_id=store_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            source=source,
        )
        self.db.add(sale)
        self.db.commit()
        self.db.refresh(sale)
        return sale

    def list_sales(
        self,
        sale_date: Optional[date] = None,
        store_id: Optional[UUID] = None,
    ) -> list[Sale]:
        query = select(Sale)
        if sale_date:
            query = query.where(Sale.date == sale_date)
        if store_id:
            query = query.where(Sale.store_id == store_id)
        return list(self.db.execute(
            query.order_by(Sale.date.desc(), Sale.created_at.desc())
        ).scalars().all())
