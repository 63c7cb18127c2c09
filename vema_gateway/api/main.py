"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from vema_gateway.api.errors import domain_exception_handler, store_exception_handler
from vema_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from vema_gateway.api.v1 import auth, funeral, loans, referrals, stokvels, store
from vema_gateway.domain.exceptions import DomainException, StoreError
from vema_gateway.infrastructure.observability.logging import setup_logging
from vema_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Vema Gateway",
        description="Loans, stokvel savings, funeral cover and member store",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(referrals.router, prefix="/v1", tags=["referrals"])
    app.include_router(stokvels.router, prefix="/v1", tags=["stokvels"])
    app.include_router(funeral.router, prefix="/v1", tags=["funeral"])
    app.include_router(store.router, prefix="/v1", tags=["store"])
    app.include_router(auth.router, prefix="/v1", tags=["auth"])

    return app


app = create_app()
