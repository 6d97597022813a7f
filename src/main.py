"""flatmate - shared expenses, groceries and chores for a flat, living in WhatsApp."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import Settings, constants, settings
from src.core.db_client import RecordStore
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.command_router import CommandRouter
from src.interface.deps import Deps
from src.interface.webhook import router as webhook_router
from src.interface.whatsapp_sender import WhatsAppSender


logger = logging.getLogger(__name__)


async def check_waha_connectivity(app_settings: Settings) -> None:
    """Verify WAHA connectivity.

    Raises:
        ConnectionError: If unable to connect to WAHA
    """
    try:
        url = f"{app_settings.waha_base_url}/api/sessions"
        headers = {}
        if app_settings.waha_api_key:
            headers["X-Api-Key"] = app_settings.waha_api_key

        async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
            response = await client.get(url, headers=headers)
            if response.is_success:
                logger.info("startup_validation", extra={"service": "waha", "status": "ok"})
            else:
                raise ConnectionError(f"WAHA returned status {response.status_code}")
    except Exception as e:
        logger.error("startup_validation", extra={"service": "waha", "status": "failed", "error": str(e)})
        raise ConnectionError(f"WAHA connectivity check failed: {e}") from e


async def validate_startup_configuration(app_settings: Settings) -> None:
    """Validate external service connectivity, exiting with a clear message on failure."""
    logger.info("startup_validation_begin")

    try:
        await check_waha_connectivity(app_settings)
        logger.info("startup_validation_complete", extra={"status": "ok"})
    except ConnectionError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


async def build_deps(app_settings: Settings) -> Deps:
    """Open the record store and wire up the collaborators shared by all requests."""
    store = await RecordStore.open(app_settings.sqlite_db_path)
    return Deps(
        settings=app_settings,
        store=store,
        router=CommandRouter(store=store, settings=app_settings),
        sender=WhatsAppSender(settings=app_settings),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so validation logs are captured
    configure_logfire(settings)

    await validate_startup_configuration(settings)

    deps = await build_deps(settings)
    app.state.deps = deps
    logger.info("Record store ready", extra={"db_path": str(deps.store.db_path)})

    yield

    await deps.store.close()


app = FastAPI(
    title="flatmate",
    description="Shared expenses, groceries and chores for a flat, living in WhatsApp",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(webhook_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("src.main:app", host="0.0.0.0", port=8000)  # noqa: S104
