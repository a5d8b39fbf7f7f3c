"""
Catalog router: products, ingredients and recipe lines.

Every endpoint that can change a product's cost goes through
CatalogService, which recalculates the affected products before
committing.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bakery_stock.db.session import get_db
from bakery_stock.schemas.catalog import (
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
    ProductCostResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    RecipeCreate,
    RecipeResponse,
)
from bakery_stock.services.catalog import CatalogService


router = APIRouter(tags=["catalog"])


# ============ Products ============

@router.get("/products", response_model=List[ProductResponse])
def list_products(db: Session = Depends(get_db)):
    return CatalogService(db).list_products()


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: UUID, db: Session = Depends(get_db)):
    return CatalogService(db).get_product(product_id)


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return CatalogService(db).create_product(payload.model_dump())


@router.patch("/products/{product_id}", response_model=ProductResponse)
def update_product(product_id: UUID, payload: ProductUpdate, db: Session = Depends(get_db)):
    return CatalogService(db).update_product(product_id, payload.model_dump(exclude_unset=True))


@router.delete("/products/{product_id}")
def delete_product(product_id: UUID, db: Session = Depends(get_db)):
    CatalogService(db).delete_product(product_id)
    return {"success": True}


@router.post("/products/{product_id}/recalculate-cost", response_model=ProductCostResponse)
def recalculate_product_cost(product_id: UUID, db: Session = Depends(get_db)):
    """Recompute unit cost from the current recipe and ingredient prices."""
    return CatalogService(db).recalculate(product_id)


@router.get("/products/{product_id}/recipes", response_model=List[RecipeResponse])
def list_product_recipes(product_id: UUID, db: Session = Depends(get_db)):
    return CatalogService(db).list_recipes(product_id)


# ============ Ingredients ============

@router.get("/ingredients", response_model=List[IngredientResponse])
def list_ingredients(db: Session = Depends(get_db)):
    return CatalogService(db).list_ingredients()


@router.post("/ingredients", response_model=IngredientResponse, status_code=status.HTTP_201_CREATED)
def create_ingredient(payload: IngredientCreate, db: Session = Depends(get_db)):
    return CatalogService(db).create_ingredient(payload.model_dump())


@router.patch("/ingredients/{ingredient_id}", response_model=IngredientResponse)
def update_ingredient(ingredient_id: UUID, payload: IngredientUpdate, db: Session = Depends(get_db)):
    """Update an ingredient; products using it get their cost recalculated."""
    return CatalogService(db).update_ingredient(ingredient_id, payload.model_dump(exclude_unset=True))


@router.delete("/ingredients/{ingredient_id}")
def delete_ingredient(ingredient_id: UUID, db: Session = Depends(get_db)):
    CatalogService(db).delete_ingredient(ingredient_id)
    return {"success": True}


# ============ Recipes ============

@router.post("/recipes", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_recipe(payload: RecipeCreate, db: Session = Depends(get_db)):
    return CatalogService(db).create_recipe(payload.product_id, payload.ingredient_id, payload.quantity)


@router.delete("/recipes/{recipe_id}")
def delete_recipe(recipe_id: UUID, db: Session = Depends(get_db)):
    CatalogService(db).delete_recipe(recipe_id)
    return {"success": True}
