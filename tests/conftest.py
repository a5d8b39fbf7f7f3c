"""
Test configuration and fixtures.
"""
import os
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

# Set test database URL before importing app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6399/0"

from bakery_stock.main import app
from bakery_stock.core.config import get_settings
from bakery_stock.db.base import Base
from bakery_stock.db.session import SessionLocal, engine, get_db
from bakery_stock.models import Ingredient, Product, Store
from bakery_stock.models.store import DeliverySchedule


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh schema and a database session for the test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database session override."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def production_center(db: Session) -> Store:
    store = Store(name=get_settings().PRODUCTION_CENTER_STORE_NAME, delivery_schedule=DeliverySchedule.DAILY.value)
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


@pytest.fixture
def retail_store(db: Session) -> Store:
    store = Store(name="Store 1 (Main)", delivery_schedule=DeliverySchedule.DAILY.value)
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


@pytest.fixture
def product(db: Session) -> Product:
    product = Product(
        code="P001",
        name="Croissant",
        selling_price=Decimal("3.50"),
        min_stock_level=10,
        max_waste_percent=5.0,
        batch_yield=1,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def second_product(db: Session) -> Product:
    product = Product(
        code="P002",
        name="Danish Pastry",
        selling_price=Decimal("4.00"),
        min_stock_level=10,
        batch_yield=1,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def flour(db: Session) -> Ingredient:
    ingredient = Ingredient(name="Flour", cost_per_unit=Decimal("0.50"), unit="kg")
    db.add(ingredient)
    db.commit()
    db.refresh(ingredient)
    return ingredient


@pytest.fixture
def butter(db: Session) -> Ingredient:
    ingredient = Ingredient(name="Butter", cost_per_unit=Decimal("3.00"), unit="kg")
    db.add(ingredient)
    db.commit()
    db.refresh(ingredient)
    return ingredient
