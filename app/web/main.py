"""
NYC Property Records Web API
FastAPI + uvicorn
"""
import traceback
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.web.routers import api
from src.exceptions import DatasetUnavailableError, InvalidBBLError, UpstreamFetchError
from src.utils.logging_config import setup_default_logging

# Configure loguru
setup_default_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("NYC Property API starting up...")
    yield
    logger.info("NYC Property API shutting down...")


app = FastAPI(
    title="NYC Property Records",
    description="ACRIS transaction history and DOF tax history by BBL",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(api.router, prefix="/api")


# =============================================================================
# Error Handlers
# =============================================================================

def _generate_error_id() -> str:
    """Generate a short error ID for tracking."""
    return str(uuid.uuid4())[:8].upper()


def _error_json(status: int, error: str, message: str, error_id: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": error, "message": message, "error_id": error_id, **extra},
    )


@app.exception_handler(InvalidBBLError)
async def invalid_bbl_handler(request: Request, exc: InvalidBBLError):
    """Malformed BBL in the path."""
    error_id = _generate_error_id()
    logger.warning(f"Invalid BBL [ID: {error_id}]: {exc} - {request.url}")
    return _error_json(400, "invalid_bbl", str(exc), error_id)


@app.exception_handler(UpstreamFetchError)
async def upstream_fetch_handler(request: Request, exc: UpstreamFetchError):
    """Document or valuation fetch failed for a BBL."""
    error_id = _generate_error_id()
    logger.error(f"Upstream fetch failed [ID: {error_id}]: {exc} - {request.url}")
    if isinstance(exc.__cause__, DatasetUnavailableError):
        return _error_json(503, "dataset_unavailable", str(exc), error_id, bbl=exc.bbl)
    return _error_json(502, "upstream_error", str(exc), error_id, bbl=exc.bbl)


@app.exception_handler(DatasetUnavailableError)
async def dataset_unavailable_handler(request: Request, exc: DatasetUnavailableError):
    error_id = _generate_error_id()
    logger.error(f"Dataset unavailable [ID: {error_id}]: {exc} - {request.url}")
    return _error_json(503, "dataset_unavailable", str(exc), error_id)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with detailed output."""
    error_id = _generate_error_id()

    # Log 4xx and 5xx errors
    if exc.status_code >= 400:
        log_fn = logger.warning if exc.status_code < 500 else logger.error
        log_fn(f"HTTP {exc.status_code} [ID: {error_id}]: {exc.detail} - {request.method} {request.url}")

    return _error_json(
        exc.status_code,
        "http_error",
        exc.detail,
        error_id,
        status_code=exc.status_code,
        path=str(request.url.path),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with detailed logging."""
    error_id = _generate_error_id()

    tb = traceback.format_exc()
    logger.error(
        f"Unhandled exception [ID: {error_id}]\n"
        f"Request: {request.method} {request.url}\n"
        f"Exception: {type(exc).__name__}: {exc}\n"
        f"Traceback:\n{tb}"
    )

    return _error_json(
        500,
        "internal_error",
        f"An unexpected error occurred: {type(exc).__name__}",
        error_id,
        details=str(exc),
        path=str(request.url.path),
    )


@app.get("/health")
async def health_check():
    """Liveness check (dataset status is under /api/health)."""
    return {"status": "ok", "service": "nyc-property"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.web.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True
    )
