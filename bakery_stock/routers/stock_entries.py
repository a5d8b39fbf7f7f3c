"""
Stock entry router: submission, correction and waste checks.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bakery_stock.db.session import get_db
from bakery_stock.schemas.stock import (
    StockEntryBatchFailure,
    StockEntryBatchRequest,
    StockEntryBatchResponse,
    StockEntryCreate,
    StockEntryResponse,
    StockEntryUpdate,
    WasteCheckResponse,
)
from bakery_stock.services.reconciliation import StockReconciliationService


router = APIRouter(prefix="/stock-entries", tags=["stock-entries"])


@router.get("", response_model=List[StockEntryResponse])
def list_stock_entries(
    date: Optional[date] = None,
    store_id: Optional[UUID] = None,
    product_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    """
    List stock entries, newest first.

    Callers restricted to one store pass its store_id.
    """
    return StockReconciliationService(db).list_entries(date, store_id, product_id)


@router.post("", response_model=StockEntryResponse, status_code=status.HTTP_201_CREATED)
def create_stock_entry(payload: StockEntryCreate, db: Session = Depends(get_db)):
    """
    Submit a stock count.

    Returns 409 if an entry already exists for the same date, product
    and store; use PATCH /stock-entries/{id} to change it.
    """
    return StockReconciliationService(db).create_stock_entry(
        payload.date,
        payload.product_id,
        payload.store_id,
        delivered=payload.delivered,
        reported_stock=payload.reported_stock,
        waste=payload.waste,
        sales=payload.sales,
    )


@router.post("/bulk", response_model=StockEntryBatchResponse)
def submit_stock_entries(payload: StockEntryBatchRequest, db: Session = Depends(get_db)):
    """
    Submit many counts at once.

    Failed items are listed with their index; successful items are kept
    unless all_or_nothing is set.
    """
    result = StockReconciliationService(db).submit_stock_entries(
        [entry.model_dump() for entry in payload.entries],
        all_or_nothing=payload.all_or_nothing,
    )
    return StockEntryBatchResponse(
        created=[StockEntryResponse.model_validate(e) for e in result.created],
        failed=[StockEntryBatchFailure(index=f.index, error=f.error, message=f.message) for f in result.failed],
    )


@router.patch("/{entry_id}", response_model=StockEntryResponse)
def update_stock_entry(entry_id: UUID, payload: StockEntryUpdate, db: Session = Depends(get_db)):
    return StockReconciliationService(db).update_stock_entry(entry_id, payload.model_dump(exclude_unset=True))


@router.get("/{entry_id}/waste-check", response_model=WasteCheckResponse)
def check_waste(entry_id: UUID, db: Session = Depends(get_db)):
    return StockReconciliationService(db).waste_check(entry_id)
