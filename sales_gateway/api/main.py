"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from sales_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from sales_gateway.api.v1 import auth, profiles, records, schedule, submissions
from sales_gateway.infrastructure.observability.logging import setup_logging
from sales_gateway.config import settings
from sales_gateway.services.container import AppContainer, build_container

# Setup structured logging
setup_logging(settings.log_level)


def create_app(container: AppContainer | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Pending delayed refreshes must not touch a torn-down app
        container.synchronizer.close()

    app = FastAPI(
        title="Sales Gateway",
        description="Installment-sale client records: identity merge, eligibility gate and submission pipeline",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.container = container

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "records": len(container.repository)}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(records.router, prefix="/v1", tags=["records"])
    app.include_router(submissions.router, prefix="/v1", tags=["submissions"])
    app.include_router(schedule.router, prefix="/v1", tags=["schedule"])
    app.include_router(profiles.router, prefix="/v1", tags=["profiles"])

    return app


app = create_app()
