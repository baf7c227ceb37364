#!/usr/bin/env python3
"""
Main entry point for the hslcard2api daemon.

This script initializes and runs the FastAPI application that decodes HSL
travel cards and single tickets posted as hex-encoded card files.

Key responsibilities include:
- Configuring application-wide logging.
- Loading and validating the record layouts at startup.
- Initializing the FastAPI application, including:
    - Setting up Prometheus metrics middleware.
    - Mapping short card data to HTTP 422.
    - Registering the API routers (card decoding, status).
- Providing a command-line interface to start the Uvicorn server.
"""
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import ResponseValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from card_daemon.config import configure_logger, get_decoder_config, get_fastapi_config, get_layout_path
from card_daemon.middleware import prometheus_http_middleware
from hsl_decoder import CardDataError
from hsl_decoder.layouts import default_layouts

from .api_routers import api_router_cards, api_router_status

# ── Logging ──────────────────────────────────────────────────────────────────
logger = configure_logger()

logger.info("hslcard2api starting up...")


def create_app():
    # ── FastAPI setup ──────────────────────────────────────────────────────────
    fastapi_config = get_fastapi_config()
    API_TITLE = fastapi_config["title"]
    API_SERVER_DESCRIPTION = fastapi_config["server_description"]
    API_ROOT_PATH = fastapi_config["root_path"]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # --- Startup ---
        get_layout_path()
        layout_set = default_layouts()
        logger.info(f"Loaded {len(layout_set.layouts)} record layouts from {layout_set.path}")
        decoder_config = get_decoder_config()
        logger.info(
            f"Card timezone: {decoder_config['timezone'] or 'system local'}, "
            f"card number validation: {decoder_config['validate_card_number']}"
        )
        yield
        # --- Shutdown ---
        logger.info("hslcard2api shutting down...")

    app = FastAPI(
        title=API_TITLE,
        servers=[{"url": "/", "description": API_SERVER_DESCRIPTION}],
        root_path=API_ROOT_PATH,
        lifespan=lifespan,
    )

    # ── Middleware ─────────────────────────────────────────────────────────────
    @app.middleware("http")
    async def prometheus_middleware_handler(request, call_next):
        """Prometheus metrics middleware for HTTP requests."""
        return await prometheus_http_middleware(request, call_next)

    # ── Exception Handlers ─────────────────────────────────────────────────────
    @app.exception_handler(CardDataError)
    async def card_data_exception_handler(request: Request, exc: CardDataError):
        """Card data shorter than its layout requires."""
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(ResponseValidationError)
    async def validation_exception_handler(request, exc):
        """Handles response validation errors with a plain text message."""
        return PlainTextResponse(f"Validation error: {exc}", status_code=500)

    # ── API Routers ────────────────────────────────────────────────────────────
    app.include_router(api_router_cards, prefix="/api")
    app.include_router(api_router_status, prefix="/api")

    return app


app = create_app()


# ── Entrypoint ─────────────────────────────────────────────────────────────
def main():
    """
    Runs the Uvicorn server for the hslcard2api application, with host, port
    and log level taken from the environment.
    """
    host = os.getenv("HSLCARD2API_HOST", "0.0.0.0")
    port = int(os.getenv("HSLCARD2API_PORT", "8000"))
    log_level = os.getenv("HSLCARD2API_LOG_LEVEL", "info").lower()

    logger.info(f"Starting Uvicorn server on {host}:{port} with log level '{log_level}'")
    uvicorn.run(app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()
