"""
Smokewatch Backend Application

Serves the dashboard bundle, the device proxy and the live session API,
and runs the sampling service for the lifetime of the app.
"""

import os
import sys
from contextlib import asynccontextmanager

import log_config  # noqa: F401
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Import API router
from api import APP_NAME, VERSION
from api import router as api_router

from core.smokewatch.device_client import DeviceClient
from core.smokewatch.exceptions import ConfigurationError
from core.smokewatch.sampling_service import SamplingService, build_source
from core.smokewatch.session import MonitorSession
from core.smokewatch.settings import MonitorSettings, load_settings
from core.smokewatch.sources import SampleSource

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def _resolve_static_dir(settings: MonitorSettings) -> str:
    if os.path.isabs(settings.static_dir):
        return settings.static_dir
    return os.path.join(ROOT_DIR, settings.static_dir)


def create_app(
    settings: MonitorSettings | None = None,
    source: SampleSource | None = None,
    start_sampling: bool = True,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Monitor settings (loaded from config when omitted)
        source: Sample source override (built from settings when omitted)
        start_sampling: Whether the lifespan starts the sampling service
    """
    config_error = None
    if settings is None:
        try:
            settings = load_settings()
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            config_error = str(e)
            settings = MonitorSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan manager for startup/shutdown."""
        # Startup
        logger.info(f"{APP_NAME} starting ({settings.mode} mode)")

        session = MonitorSession(settings)
        device_client = DeviceClient(timeout=settings.device_timeout)
        app.state.session = session
        app.state.device_client = device_client
        app.state.sampler = None

        if config_error:
            session.last_error = f"Invalid configuration: {config_error}"
            logger.warning("Sampling disabled until the configuration is fixed")
        else:
            try:
                sample_source = source or build_source(settings, device_client)
            except ConfigurationError as e:
                logger.error(f"Cannot start sampling: {e}")
                session.last_error = f"Invalid configuration: {e}"
                sample_source = None

            if sample_source is not None:
                app.state.sampler = SamplingService(session, sample_source, settings.refresh_seconds)
                if start_sampling:
                    await app.state.sampler.start()

        yield

        # Shutdown
        logger.info(f"{APP_NAME} shutting down")
        if app.state.sampler:
            await app.state.sampler.stop()
        device_client.close()

    app = FastAPI(
        title="Smokewatch API",
        description="Smoker telemetry monitor with cook-completion forecasting",
        version=VERSION,
        lifespan=lifespan,
    )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Handle all unhandled exceptions gracefully."""
        import traceback

        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

        logger.error(f"Unhandled exception: {exc}")
        logger.error(f"Request path: {request.url.path}")
        logger.error(f"Stack trace:\n{tb_str}")

        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "type": type(exc).__name__,
                "message": "Internal server error",
            },
        )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    app.include_router(api_router)

    # Mount compiled dashboard assets
    static_dir = _resolve_static_dir(settings)
    assets_dir = os.path.join(static_dir, "assets")
    if os.path.isdir(assets_dir):
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")
        logger.info(f"Mounted dashboard assets from {assets_dir}")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa_fallback(full_path: str, request: Request):
        """Serve bundle files, falling back to the single-page entry document."""
        if full_path.startswith("api/"):
            return JSONResponse(status_code=404, content={"detail": "Not Found"})

        candidate = os.path.realpath(os.path.join(static_dir, full_path))
        if (
            full_path
            and candidate.startswith(os.path.realpath(static_dir) + os.sep)
            and os.path.isfile(candidate)
        ):
            return FileResponse(candidate)

        index_path = os.path.join(static_dir, "index.html")
        if not os.path.isfile(index_path):
            return JSONResponse(status_code=404, content={"detail": "Dashboard bundle not found"})
        return FileResponse(index_path)

    return app


# Create FastAPI application
app = create_app()


# For development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 3000)))
