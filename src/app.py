"""Main FastAPI application with dependency injection."""

import os
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from src.config import config
from src.core.logging import logger
from src.exceptions import UpstreamError, ViewerProxyException
from src.services.aps_client import ApsClient
from src.api.routes import auth, models, observability


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    # Startup
    logger.info("Starting up viewer proxy...")

    settings = config.aps_settings()
    http = httpx.AsyncClient(timeout=settings.timeout_sec)
    try:
        app.state.aps_client = ApsClient(settings, http)
        logger.info(f"APS client initialized (bucket={settings.bucket}, base_url={settings.base_url})")

        if config.has_credentials():
            try:
                await app.state.aps_client.ensure_bucket()
            except UpstreamError as e:
                # Requests will surface the problem; the service can still start
                logger.error(f"Could not verify bucket {settings.bucket}: {e}")
        else:
            logger.warning("APS_CLIENT_ID/APS_CLIENT_SECRET not set; APS calls will fail")

        logger.info("Viewer proxy ready")

        yield

        # Shutdown
        logger.info("Shutting down viewer proxy...")
    finally:
        await http.aclose()
        logger.info("Viewer proxy stopped")


# Create FastAPI app
app = FastAPI(
    title=config.TITLE,
    version=config.VERSION,
    description="API for uploading, listing, and checking status of Autodesk models.",
    lifespan=lifespan
)


# Include routers
app.include_router(observability.router, tags=["Observability"])
app.include_router(auth.router, tags=["Auth"])
app.include_router(models.router, tags=["Models"])


# Exception handlers
@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: Request, exc: UpstreamError):
    """Handle failed APS calls."""
    logger.error(
        f"Upstream failure on {request.url.path}: {exc}",
        extra={"operation": exc.operation, "upstream_status": exc.upstream_status},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.exception_handler(ViewerProxyException)
async def client_exception_handler(request: Request, exc: ViewerProxyException):
    """Handle errors caused by the request itself."""
    if config.REQUEST_LOG:
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# Static viewer page at the root when present, API docs otherwise
if os.path.isdir(config.STATIC_DIR):
    app.mount("/", StaticFiles(directory=config.STATIC_DIR, html=True), name="static")
else:
    @app.get("/", include_in_schema=False)
    async def root_redirect():
        """Redirect root to API docs."""
        return RedirectResponse(url="/docs")
