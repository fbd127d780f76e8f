# storefront/api/__init__.py
from fastapi import FastAPI
from storefront.api.routers import addresses, carts, orders
from storefront.api.routers.health import router as health_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
    )

    # Include routers
    app.include_router(health_router)
    app.include_router(carts.router)
    app.include_router(addresses.router)
    app.include_router(orders.router)

    return app
