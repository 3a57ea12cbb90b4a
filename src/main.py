"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from src.api.health import router as health_router
from src.api.rate_limit import limiter, rate_limit_exceeded_handler
from src.api.routes import router as api_router
from src.config import get_settings
from src.infrastructure.database import close_database, init_database
from src.infrastructure.observability import init_observability, shutdown_observability

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler for startup/shutdown."""
    db_path = Path(settings.database_path)
    await init_database(db_path)
    logger.info("app_started", app=settings.app_name, version=settings.app_version)

    yield

    await close_database()
    shutdown_observability()
    logger.info("app_stopped")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Instrumentation adds middleware, so it must run before the app starts
init_observability(
    settings.app_name,
    settings.app_version,
    otlp_endpoint=settings.otel_endpoint,
    console_export=settings.otel_console_export,
    enabled=settings.otel_enabled,
    sample_rate=settings.otel_sample_rate,
    debug=settings.debug,
    app=app,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    rate_limit_exceeded_handler,  # type: ignore[arg-type]
)

# Register routers
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(api_router, tags=["documents"])


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
