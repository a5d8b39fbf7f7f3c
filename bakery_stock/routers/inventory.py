"""
Inventory router: production ledger and current levels.
"""
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bakery_stock.db.session import get_db
from bakery_stock.schemas.stock import InventoryAdjustment, LedgerEntryResponse, ProductionCreate
from bakery_stock.services.inventory_ledger import InventoryLedger


router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.post("/production", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
def record_production(payload: ProductionCreate, db: Session = Depends(get_db)):
    """Record a production batch at the production center."""
    return InventoryLedger(db).record_production(
        payload.date, payload.product_id, payload.quantity_produced, notes=payload.notes
    )


@router.post("/adjustments", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
def adjust_inventory(payload: InventoryAdjustment, db: Session = Depends(get_db)):
    """Apply a signed stock correction; rejected if it would go below zero."""
    return InventoryLedger(db).update_inventory_stock(
        payload.product_id, payload.delta, reason=payload.reason, store_id=payload.store_id
    )


@router.get("/current", response_model=Dict[UUID, int])
def current_levels(store_id: Optional[UUID] = None, db: Session = Depends(get_db)):
    """Current stock per product; production center unless store_id is given."""
    return InventoryLedger(db).get_current_inventory_levels(store_id)


@router.get("/product/{product_id}", response_model=List[LedgerEntryResponse])
def product_history(product_id: UUID, store_id: Optional[UUID] = None, db: Session = Depends(get_db)):
    return InventoryLedger(db).history(product_id, store_id)
