"""Cold Chain FastAPI Application Entry Point."""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from coldchain import __version__
from coldchain.api import router as api_router
from coldchain.api.responses import register_exception_handlers
from coldchain.core.config import settings
from coldchain.core.deps import DbSession, build_engine, build_session_factory
from coldchain.core.logging_config import configure_logging
from coldchain.services.health_service import health_service
from coldchain.services.telemetry_store import SqlTelemetryStore

configure_logging(settings.log_level, settings.environment)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Own the database engine and store for the lifetime of the app."""
    logger.info("Starting cold chain API", environment=settings.environment)

    engine = build_engine(settings)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.store = SqlTelemetryStore(app.state.session_factory)

    if not settings.api_key:
        logger.warning("API_KEY not configured, /api routes are unauthenticated")

    yield

    logger.info("Shutting down cold chain API")
    await engine.dispose()


fastapi_app = FastAPI(
    title="Cold Chain Telemetria Sensores API",
    description="Telemetria de sensores de cold chain: leituras, portas e relatórios",
    version=__version__,
    docs_url="/api-docs",
    redoc_url="/api-redoc",
    lifespan=lifespan,
)

# CORS middleware
fastapi_app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "x-api-key"],
)


@fastapi_app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Request handled",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return response


register_exception_handlers(fastapi_app)

# Include API routes
fastapi_app.include_router(api_router, prefix="/api")


# Set up Prometheus metrics instrumentation
_instrumentator = None
if settings.metrics_enabled:
    from coldchain.core.metrics import setup_metrics, expose_metrics

    _instrumentator = setup_metrics(fastapi_app)
    expose_metrics(fastapi_app, _instrumentator)


@fastapi_app.get("/")
async def root() -> dict[str, str]:
    return {
        "message": "Cold Chain Telemetria Sensores API",
        "version": __version__,
        "documentation": "/api-docs",
    }


@fastapi_app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for container probes."""
    return {"status": "healthy", "version": __version__}


@fastapi_app.get("/health/live")
async def liveness_check() -> dict:
    """Liveness probe - checks if application is running."""
    return health_service.get_liveness().to_dict()


@fastapi_app.get("/health/ready")
async def readiness_check(db: DbSession) -> dict:
    """Readiness probe - checks if the database answers."""
    result = await health_service.get_readiness(db)
    return result.to_dict()


# This is what uvicorn should serve
app = fastapi_app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("coldchain.main:app", host="0.0.0.0", port=settings.port)
