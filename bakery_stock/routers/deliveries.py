"""
Deliveries and sales router.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bakery_stock.db.session import get_db
from bakery_stock.schemas.stock import (
    DeliveryCreate,
    DeliveryResponse,
    DeliveryUpdate,
    PredeterminedApplyRequest,
    PredeterminedDeliveryCreate,
    PredeterminedDeliveryResponse,
    SaleCreate,
    SaleResponse,
)
from bakery_stock.services.deliveries import DeliveryService


router = APIRouter(tags=["deliveries"])


@router.get("/deliveries", response_model=List[DeliveryResponse])
def list_deliveries(
    date: Optional[date] = None,
    store_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    return DeliveryService(db).list_deliveries(date, store_id)


@router.post("/deliveries", response_model=DeliveryResponse, status_code=status.HTTP_201_CREATED)
def create_delivery(payload: DeliveryCreate, db: Session = Depends(get_db)):
    """
    Send products from the production center to a store.

    Deducts production center stock (409 if insufficient), credits the
    store and adds the quantity to that day's stock entry.
    """
    return DeliveryService(db).create_delivery(
        payload.date, payload.store_id, payload.product_id, payload.quantity_sent
    )


@router.patch("/deliveries/{delivery_id}", response_model=DeliveryResponse)
def update_delivery(delivery_id: UUID, payload: DeliveryUpdate, db: Session = Depends(get_db)):
    """Correct a delivery. The old quantity is returned to the production center first."""
    return DeliveryService(db).update_delivery(delivery_id, payload.model_dump(exclude_unset=True))


@router.delete("/deliveries/{delivery_id}")
def delete_delivery(delivery_id: UUID, db: Session = Depends(get_db)):
    DeliveryService(db).delete_delivery(delivery_id)
    return {"success": True}


@router.post(
    "/deliveries/predetermined",
    response_model=List[DeliveryResponse],
    status_code=status.HTTP_201_CREATED,
)
def apply_predetermined_deliveries(payload: PredeterminedApplyRequest, db: Session = Depends(get_db)):
    return DeliveryService(db).apply_predetermined_deliveries(
        payload.date, payload.store_id, payload.quantities
    )


@router.get("/predetermined-deliveries", response_model=List[PredeterminedDeliveryResponse])
def list_predetermined_deliveries(store_id: Optional[UUID] = None, db: Session = Depends(get_db)):
    return DeliveryService(db).list_predetermined_deliveries(store_id)


@router.post("/predetermined-deliveries", response_model=PredeterminedDeliveryResponse)
def set_predetermined_delivery(payload: PredeterminedDeliveryCreate, db: Session = Depends(get_db)):
    """Create or replace a store's standing order for a product."""
    return DeliveryService(db).set_predetermined_delivery(
        payload.store_id, payload.product_id, payload.default_quantity, payload.frequency
    )


@router.get("/sales", response_model=List[SaleResponse])
def list_sales(
    date: Optional[date] = None,
    store_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    return DeliveryService(db).list_sales(date, store_id)


@router.post("/sales", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    return DeliveryService(db).record_sale(
        payload.date,
        payload.store_id,
        payload.product_id,
        payload.quantity,
        unit_price=payload.unit_price,
        source=payload.source,
    )
