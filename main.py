from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import Database
from shared.config.settings import Settings, get_settings
from shared.observability import setup_observability
from shared.security import build_limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models  # noqa: F401
from services.product_service import models as product_models  # noqa: F401
from services.cart_service import models as cart_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401
from services.payment_service import models as payment_models  # noqa: F401

from services.auth_service.router import router as auth_router
from services.product_service.router import (
    router as product_router,
    admin_router as product_admin_router,
    category_router,
    category_admin_router,
)
from services.cart_service.router import router as cart_router
from services.order_service.router import router as order_router, internal_router as order_internal_router
from services.payment_service.router import router as payment_router
from services.checkout_service.router import build_router as build_checkout_router
from services.checkout_service.gateway import HttpPaymentGateway


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Ecommerce Checkout API", version="1.0.0")

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, "ecommerce_api", settings)

    # --- SECURITY SETUP ---
    limiter = build_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Settings, store handle and gateway client are owned by the app, not by module globals
    app.state.settings = settings
    app.state.database = Database(settings.database_url, echo=settings.db_echo)
    app.state.payment_gateway = HttpPaymentGateway(
        settings.payment_url,
        settings.internal_api_key,
        settings.payment_timeout_seconds,
    )

    @app.on_event("startup")
    async def startup_event():
        await app.state.database.create_all()

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.payment_gateway.aclose()
        await app.state.database.dispose()

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": "ecommerce_api", "status": "running"}

    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(product_admin_router)
    app.include_router(category_router)
    app.include_router(category_admin_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(order_internal_router)
    app.include_router(payment_router)
    app.include_router(build_checkout_router(limiter, settings))
    return app


app = create_app()
