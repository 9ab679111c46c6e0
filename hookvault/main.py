"""
hookvault - flat JSON webhook inbox backed by a key-value store.

Features:
- Webhook ingestion under per-project namespaces with retention TTL
- Cursor-paginated listing, namespace discovery and bounded batch delete
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from .adapters.base import KVStore
from .api.router import router
from .config import Settings, get_settings
from .errors import register_error_handlers
from .health import HealthChecker
from .logging import setup_logging, get_logger
from .metrics import Metrics
from .middleware import CorrelationIdMiddleware, MetricsMiddleware
from .services.webhooks import WebhookService

SERVICE_NAME = "hookvault"
VERSION = "0.1.0"

logger = get_logger()


def create_app(settings: Settings | None = None, store: KVStore | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (defaults to the cached environment settings)
        store: Store backend override (defaults to the STORE_ADAPTER selection)
    """
    settings = settings or get_settings()
    metrics = Metrics(service_name=SERVICE_NAME, version=VERSION)
    service = WebhookService.from_settings(settings, store=store, metrics=metrics)
    health_checker = HealthChecker(service.store, service_name=SERVICE_NAME, version=VERSION)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "service_starting",
            version=VERSION,
            env=settings.ENV,
            store=type(service.store).__name__,
            allowlist_size=len(settings.allowlist),
            retention_ttl_seconds=settings.retention_ttl_seconds,
        )
        yield
        logger.info("service_stopping")
        metrics.app_up.labels(service=SERVICE_NAME, version=VERSION).set(0)
        await service.close()

    app = FastAPI(
        title="hookvault",
        version=VERSION,
        description="Flat JSON webhook inbox with namespaced key-value storage",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service
    app.state.metrics = metrics

    # Added last runs first: correlation id is bound before metrics logs
    app.add_middleware(MetricsMiddleware, metrics=metrics)
    app.add_middleware(CorrelationIdMiddleware)
    register_error_handlers(app)

    app.include_router(router)
    app.mount("/metrics", make_asgi_app(registry=metrics.registry))

    @app.get("/health")
    async def health():
        """Liveness probe - returns 200 if service is running."""
        return health_checker.liveness()

    @app.get("/health/ready")
    async def health_ready():
        """
        Readiness probe.

        Returns:
            200: Service is ready to handle traffic
            503: Store unreachable or memory exhausted
        """
        result = await health_checker.readiness()
        status_code = 200 if result["status"] == "ready" else 503
        return JSONResponse(result, status_code=status_code)

    return app


def main():
    import uvicorn

    settings = get_settings()
    setup_logging(json_output=settings.LOG_JSON, service_name=SERVICE_NAME)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.SERVICE_PORT)


if __name__ == "__main__":
    main()
