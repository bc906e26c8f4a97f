# product_service/main.py
from fastapi import FastAPI, HTTPException, Query

app = FastAPI(title="Product Service (dev mock)")


PRODUCTS = {
    "sku-1": {"id": "sku-1", "storeId": "S1", "name": "Keyboard", "price": 199.99,
              "category": "Peripherals", "quantity": 12, "averageRating": 4.5},
    "sku-2": {"id": "sku-2", "storeId": "S2", "name": "Mouse", "price": 49.50,
              "category": "Peripherals", "quantity": 40},
    "sku-3": {"id": "sku-3", "storeId": "S1", "name": "Monitor", "price": 899.00,
              "category": "Displays", "quantity": 3,
              "description": "27 inch IPS"},
}


@app.get("/products")
def list_products(ids: str = Query("")):
    wanted = [i for i in ids.split(",") if i]
    return [PRODUCTS[i] for i in wanted if i in PRODUCTS]


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
