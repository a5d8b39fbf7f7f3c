"""
Store router.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bakery_stock.core.config import get_settings
from bakery_stock.db.session import get_db
from bakery_stock.models.store import Store
from bakery_stock.schemas.catalog import StoreCreate, StoreResponse


router = APIRouter(prefix="/stores", tags=["stores"])


def to_response(store: Store) -> StoreResponse:
    return StoreResponse(
        id=store.id,
        name=store.name,
        delivery_schedule=store.delivery_schedule,
        is_production_center=store.name == get_settings().PRODUCTION_CENTER_STORE_NAME,
    )


@router.get("", response_model=List[StoreResponse])
def list_stores(db: Session = Depends(get_db)):
    stores = db.execute(select(Store).order_by(Store.name)).scalars().all()
    return [to_response(s) for s in stores]


@router.get("/{store_id}", response_model=StoreResponse)
def get_store(store_id: UUID, db: Session = Depends(get_db)):
    store = db.get(Store, store_id)
    if not store:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")
    return to_response(store)


@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
def create_store(payload: StoreCreate, db: Session = Depends(get_db)):
    store = Store(name=payload.name, delivery_schedule=payload.delivery_schedule.value)
    db.add(store)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Store name already exists")
    db.refresh(store)
    return to_response(store)
