from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from rewards_api.core.settings import settings
from rewards_api.db.session import engine
from .api.responses import http_exception_handler, validation_exception_handler
from .api.routes import api_router
from .core.logging import configure_logging
from .observability.tracing import configure_tracing
from .services.retail import RetailApiClient


APP_VERSION = "0.1.0"
SERVICE_NAME = "rewards-api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    retail_client: RetailApiClient | None = None
    if settings.retail_api_enabled:
        retail_client = RetailApiClient.from_settings(settings)
        logger.info("Retail API client enabled", base_url=settings.retail_api_base_url)
    else:
        logger.info("Retail API client disabled; discount codes are issued locally only")
    app.state.retail_client = retail_client

    try:
        yield
    finally:
        if retail_client is not None:
            await retail_client.aclose()
        await engine.dispose()


def create_app() -> FastAPI:
    """Application factory for the rewards API."""
    configure_logging(
        service_name=SERVICE_NAME,
        environment=settings.environment,
        version=APP_VERSION,
    )

    app = FastAPI(
        title="Rewards API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    configure_tracing(
        app,
        service_name=SERVICE_NAME,
        service_version=APP_VERSION,
        environment=settings.environment,
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(api_router)

    @app.get("/healthz", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": APP_VERSION,
        }

    return app
