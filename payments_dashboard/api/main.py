"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from payments_dashboard.api.dependencies import build_synchronizer
from payments_dashboard.api.middleware import MetricsMiddleware, RequestIDMiddleware
from payments_dashboard.api.v1 import export, payment, view
from payments_dashboard.config import settings
from payments_dashboard.infrastructure.clients.price import PriceClient
from payments_dashboard.infrastructure.observability.logging import setup_logging
from payments_dashboard.services.synchronizer import ViewSynchronizer

# Setup structured logging
setup_logging(settings.log_level)


def create_app(
    synchronizer: ViewSynchronizer | None = None,
    price_client: PriceClient | None = None,
) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Payments Dashboard",
        description="Paginated, filterable view over a Lightning node's payments",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # One view per process; the rendering layer reads its snapshots
    app.state.synchronizer = synchronizer or build_synchronizer()
    app.state.price_client = price_client or PriceClient()

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

    # Register API routers; view and export before payment so their paths are not read as ids
    app.include_router(view.router, prefix="/v1", tags=["payments-view"])
    app.include_router(export.router, prefix="/v1", tags=["payments-export"])
    app.include_router(payment.router, prefix="/v1", tags=["payments"])

    return app


app = create_app()
