"""
Seed a development database with the production center, retail stores,
ingredients, products and recipes.

Run with: python -m bakery_stock.scripts.seed
"""
from datetime import date
from decimal import Decimal

from bakery_stock.core.config import get_settings
from bakery_stock.db.base import Base
from bakery_stock.db.session import SessionLocal, engine
from bakery_stock.models.product import Ingredient, Product
from bakery_stock.models.store import DeliverySchedule, Store
from bakery_stock.services.catalog import CatalogService
from bakery_stock.services.deliveries import DeliveryService
from bakery_stock.services.inventory_ledger import InventoryLedger

STORES = [
    ("Store 1 (Main)", DeliverySchedule.DAILY),
    ("Store 2 (Daily Delivery)", DeliverySchedule.DAILY),
    ("Store 3 (Every 2 Days)", DeliverySchedule.EVERY_2_DAYS),
]

INGREDIENTS = [
    ("Flour", "0.50", "kg"),
    ("Butter", "3.00", "kg"),
    ("Sugar", "1.00", "kg"),
    ("Eggs", "0.20", "piece"),
    ("Yeast", "2.00", "kg"),
    ("Milk", "1.50", "liter"),
]

# code, name, selling price, min stock, batch yield, recipe per batch
PRODUCTS = [
    ("P001", "Croissant", "3.50", 10, 24, {"Flour": "2.0", "Butter": "1.0", "Milk": "0.5", "Yeast": "0.05"}),
    ("P002", "Danish Pastry", "4.00", 8, 20, {"Flour": "1.8", "Butter": "1.0", "Sugar": "0.4", "Eggs": "4"}),
    ("P003", "Sourdough Bread", "6.00", 15, 6, {"Flour": "3.0"}),
    ("P004", "Baguette", "2.50", 20, 10, {"Flour": "2.5", "Yeast": "0.03"}),
    ("P005", "Muffin", "2.00", 25, 12, {"Flour": "0.6", "Sugar": "0.3", "Eggs": "3", "Milk": "0.3"}),
]

# Standing orders: store -> {product code: default quantity}
STANDING_ORDERS = {
    "Store 1 (Main)": {"P001": 20, "P002": 10, "P004": 15},
    "Store 2 (Daily Delivery)": {"P001": 12, "P005": 12},
    "Store 3 (Every 2 Days)": {"P003": 6, "P004": 10},
}


def seed():
    settings = get_settings()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    catalog = CatalogService(db)

    try:
        print("Creating stores...")
        for name, schedule in [(settings.PRODUCTION_CENTER_STORE_NAME, DeliverySchedule.DAILY)] + STORES:
            if not db.query(Store).filter(Store.name == name).first():
                db.add(Store(name=name, delivery_schedule=schedule.value))
        db.commit()

        print("Creating ingredients...")
        ingredients = {}
        for name, cost, unit in INGREDIENTS:
            ingredient = db.query(Ingredient).filter(Ingredient.name == name).first()
            if not ingredient:
                ingredient = catalog.create_ingredient({"name": name, "cost_per_unit": Decimal(cost), "unit": unit})
            ingredients[name] = ingredient

        print("Creating products and recipes...")
        products = []
        for code, name, price, min_stock, batch_yield, recipe in PRODUCTS:
            product = db.query(Product).filter(Product.code == code).first()
            if not product:
                product = catalog.create_product({
                    "code": code,
                    "name": name,
                    "selling_price": Decimal(price),
                    "min_stock_level": min_stock,
                    "batch_yield": batch_yield,
                })
                for ingredient_name, quantity in recipe.items():
                    catalog.create_recipe(product.id, ingredients[ingredient_name].id, Decimal(quantity))
            products.append(product)

        ledger = InventoryLedger(db)
        levels = ledger.get_current_inventory_levels()
        for product in products:
            if levels.get(product.id, 0) == 0:
                ledger.record_production(date.today(), product.id, product.batch_yield * 4, notes="Opening stock")

        print("Creating standing orders...")
        deliveries = DeliveryService(db)
        by_code = {product.code: product for product in products}
        for store_name, quantities in STANDING_ORDERS.items():
            store = db.query(Store).filter(Store.name == store_name).one()
            for code, quantity in quantities.items():
                deliveries.set_predetermined_delivery(store.id, by_code[code].id, quantity)

        print("Database seeded successfully!")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
