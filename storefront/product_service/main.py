# storefront/product_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Product Catalog (dev mock)")


PRODUCTS = {
    1: {
        "id": 1,
        "name": "Merino Crewneck Sweater",
        "price": "98.00",
        "image_url": "/images/products/merino-crewneck.jpg",
        "sku": "SWT-MER-001",
        "stock": 40,
    },
    2: {
        "id": 2,
        "name": "Organic Cotton Tee",
        "price": "25.00",
        "image_url": "/images/products/cotton-tee.jpg",
        "sku": "TEE-ORG-002",
        "stock": 120,
    },
    3: {
        "id": 3,
        "name": "Relaxed Chino",
        "price": "79.50",
        "image_url": "/images/products/relaxed-chino.jpg",
        "sku": "PNT-CHN-003",
        "stock": 60,
    },
}


@app.get("/products/{product_id}")
def get_product(product_id: int):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
