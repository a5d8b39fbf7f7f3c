"""
SQLAlchemy models for the bakery stock service.
"""
# Stores
from bakery_stock.models.store import Store, DeliverySchedule

# Catalog & recipes
from bakery_stock.models.product import Ingredient, Product, Recipe

# Stock counts, deliveries, sales
from bakery_stock.models.stock import StockEntry, Delivery, Sale, PredeterminedDelivery

# Inventory ledger
from bakery_stock.models.inventory import InventoryLedgerEntry, InventoryLevel, MovementType


__all__ = [
    # Stores
    "Store",
    "DeliverySchedule",
    # Catalog
    "Ingredient",
    "Product",
    "Recipe",
    # Stock
    "StockEntry",
    "Delivery",
    "Sale",
    "PredeterminedDelivery",
    # Inventory
    "InventoryLedgerEntry",
    "InventoryLevel",
    "MovementType",
]
