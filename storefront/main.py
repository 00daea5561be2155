import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from storefront.config import settings
from storefront.database import create_db_and_tables, engine
from storefront.exceptions import StorefrontError
from storefront.routes import cart, catalog, checkout, health
from storefront.services.order_storage import migrate_legacy_state

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()

    with Session(engine) as session:
        migrate_legacy_state(session)

    yield


app = FastAPI(title="Gaddyel Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind.value} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(catalog.router, prefix="/products", tags=["Catalog"])
app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])


@app.get("/")
def root():
    return {
        "catalog": ["/products", "/products/{product_id}"],
        "cart": [
            "/cart", "/cart/add", "/cart/update/{product_id}",
            "/cart/remove/{product_id}", "/cart/clear"
        ],
        "checkout": [
            "/checkout/summary", "/checkout/submit", "/checkout/current-order",
            "/checkout/current-order/status", "/checkout/orders/{order_id}",
            "/checkout/orders/{order_id}/retry-payment"
        ]
    }
