import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from services.cart_service.exceptions import CartValidationError
from services.cart_service.repository import build_cart_repository
from services.cart_service.router import router as cart_router
from services.cart_service.schemas import CartErrorResponse
from services.cart_service.service import CartService
from services.product_service.repository import ProductRepository
from services.product_service.router import router as product_router
from services.product_service.service import Catalog
from services.session_service.interceptors import SessionCookieInterceptor
from services.session_service.router import router as session_router
from services.session_service.service import SessionBinder
from shared.config.settings import Settings
from shared.observability import setup_observability
from shared.security.dependencies import verify_internal_api_key
from shared.security.interceptors import (
    AuditInterceptor,
    AuditLog,
    InterceptorMiddleware,
    SecurityHeadersInterceptor,
)
from shared.security.rate_limiter import configure_limiter, current_rate_limit, limiter

logger = structlog.get_logger(__name__)

public_router = APIRouter(prefix="/api")
admin_router = APIRouter(prefix="/api/admin", dependencies=[Depends(verify_internal_api_key)])


@public_router.get("/health")
@limiter.limit(current_rate_limit)
async def health_check(request: Request, response: Response):
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }


@admin_router.get("/audit")
@limiter.limit(current_rate_limit)
async def audit_log(request: Request, response: Response, limit: int = Query(default=100, ge=1, le=1000)):
    return [entry.to_dict() for entry in request.app.state.audit_log.recent(limit)]


async def cart_validation_handler(request: Request, exc: CartValidationError):
    body = CartErrorResponse(error=exc.message, reason=exc.reason.value, available=exc.available)
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("app.unhandled_error", path=request.url.path)
    debug = request.app.state.settings.debug
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) if debug else "Internal server error"},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    repository = app.state.cart_repository
    await repository.init()
    logger.info("app.started", backend=app.state.settings.cart_store_backend)
    try:
        yield
    finally:
        await repository.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title=f"{settings.app_name} Shop API",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Owned components, built once and shared through app.state
    catalog = Catalog(ProductRepository.from_seed())
    cart_repository = build_cart_repository(settings)
    cart_service = CartService(catalog, cart_repository)

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.catalog = catalog
    app.state.cart_repository = cart_repository
    app.state.cart_service = cart_service
    app.state.session_binder = SessionBinder(
        cart_service, settings.session_secret, settings.session_ttl_seconds
    )
    app.state.audit_log = AuditLog(settings.audit_log_size)

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, settings)

    # --- SECURITY SETUP ---
    app.state.limiter = configure_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(
        InterceptorMiddleware,
        interceptors=[
            AuditInterceptor(app.state.audit_log, settings.suspicious_requests_per_minute),
            SecurityHeadersInterceptor(),
            SessionCookieInterceptor(settings),
        ],
    )

    app.add_exception_handler(CartValidationError, cart_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(public_router)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(session_router)
    app.include_router(admin_router)

    return app


if __name__ == "__main__":
    env_settings = Settings.from_env()
    uvicorn.run("main:create_app", factory=True, host=env_settings.host, port=env_settings.port)
