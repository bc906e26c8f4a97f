# app/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.data.database import Base, engine
from app.api.routers import carts, health
from app.services.cart_cache import CartCache
from app.services.product_client import ProductClient
from app.utils.logging import get_logger
import uvicorn

# import modeli zeby trafily do Base.metadata przed create_all
from app.data.models import CartLineModel  # noqa: F401

logger = get_logger(__name__)


def init_db(bind=engine):
    logger.info(f"Tworzenie tabel: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=bind)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app(
    cart_cache: CartCache | None = None,
    product_client: ProductClient | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # wspoldzielone klienty na caly proces, nie per request
    app.state.cart_cache = cart_cache or CartCache.from_url()
    app.state.product_client = product_client or ProductClient()

    # Include routers
    app.include_router(health.router)
    app.include_router(carts.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
