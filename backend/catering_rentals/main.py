"""Catering Rentals — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from catering_rentals.api.v1.bookings import router as bookings_router
from catering_rentals.api.v1.catalog import router as catalog_router
from catering_rentals.api.views import router as views_router
from catering_rentals.config import Settings
from catering_rentals.gateway import DataGateway, create_gateway
from catering_rentals.services.errors import BlockingPrompt

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Catering Rentals"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger so all catering_rentals.* loggers output to stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, gateway: DataGateway | None = None) -> FastAPI:
    """Build the application.

    Settings are read from the environment at startup when not given. The
    gateway is built from settings at startup and closed at shutdown, unless
    one is injected, in which case its lifecycle belongs to the caller.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        if getattr(app.state, "settings", None) is None:
            app.state.settings = Settings()
        configure_logging(app.state.settings.log_level)
        owns_gateway = getattr(app.state, "gateway", None) is None
        if owns_gateway:
            app.state.gateway = create_gateway(app.state.settings)
            logger.info("Data gateway ready (%s backend)", app.state.settings.gateway_backend)
        yield
        # Shutdown: release gateway connections
        if owns_gateway:
            await app.state.gateway.aclose()
            app.state.gateway = None

    app = FastAPI(
        title=settings.app_name if settings else DEFAULT_TITLE,
        version=settings.app_version if settings else "0.1.0",
        description="Booking manager for a catering-equipment rental business.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gateway = gateway

    @app.exception_handler(BlockingPrompt)
    async def blocking_prompt_handler(request: Request, exc: BlockingPrompt) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.message, "blocking": True})

    # Routers
    app.include_router(views_router)
    app.include_router(bookings_router)
    app.include_router(catalog_router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": app.title}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = Settings()
    uvicorn.run("catering_rentals.main:app", host=_settings.host, port=_settings.port, reload=_settings.debug)
