"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from payplan_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from payplan_gateway.api.v1 import installments, orders, payment_conditions, plan, recurring
from payplan_gateway.infrastructure.observability.logging import setup_logging
from payplan_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Payplan Gateway",
        description="Purchase order installment plans and recurring expense billing",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(payment_conditions.router, prefix="/v1", tags=["payment-conditions"])
    app.include_router(plan.router, prefix="/v1", tags=["plans"])
    app.include_router(orders.router, prefix="/v1", tags=["orders"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(recurring.router, prefix="/v1", tags=["recurring-expenses"])

    return app


app = create_app()
