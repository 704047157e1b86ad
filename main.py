import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from shared.config.database import create_tables
from shared.config.settings import Settings, get_settings
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models  # noqa: F401
from services.product_service import models as product_models  # noqa: F401
from services.cart_service import models as cart_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401

from services.auth_service.router import router as auth_router
from services.product_service.router import router as product_router, admin_router as admin_product_router
from services.cart_service.router import router as cart_router
from services.order_service.router import router as order_router, admin_router as admin_order_router

logger = structlog.get_logger(__name__)

DATA_SERVICE_UNAVAILABLE = "Service temporarily unavailable. Please try again."


async def data_service_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        "data_service_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(status_code=503, content={"detail": DATA_SERVICE_UNAVAILABLE})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="ShopEasy Storefront",
        version="1.0.0",
        description="Product catalogue, cart, cash-on-delivery checkout and admin dashboard.",
    )

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, "storefront", settings)

    # --- SECURITY SETUP ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(SQLAlchemyError, data_service_error_handler)

    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(admin_product_router)
    app.include_router(admin_order_router)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": "storefront", "status": "running"}

    @app.on_event("startup")
    async def startup_event():
        await create_tables()

    return app


app = create_app()
