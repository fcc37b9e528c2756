"""
FastAPI main application.

Investment Tracker backend API.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import logging
import uuid

from invest_tracker import __version__
from invest_tracker.config import settings
from invest_tracker.api import investments_router, manual_prices_router, portfolio_router
from invest_tracker.exceptions import StorageError
from invest_tracker.schemas.portfolio import ErrorDetail, ErrorResponse
from invest_tracker.services.redis_client import close_redis_client

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Personal investment tracking with live valuation and daily value history",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(investments_router)
app.include_router(manual_prices_router)
app.include_router(portfolio_router)


def _internal_error_response(request: Request, exc: Exception, message: str) -> JSONResponse:
    """Generic 500 body; the details only go to the log under the request id."""
    request_id = str(uuid.uuid4())
    error_response = ErrorResponse(
        error=ErrorDetail(code="INTERNAL_SERVER_ERROR", message=message),
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=request.url.path,
        request_id=request_id,
    )
    logger.error(f"[{request_id}] {type(exc).__name__} on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content=error_response.model_dump())


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    return _internal_error_response(request, exc, "Storage is unavailable")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    return _internal_error_response(request, exc, "An unexpected error occurred")


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.environment,
        "storage": settings.storage_backend,
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Investment Tracker API",
        "docs": "/api/docs",
        "health": "/api/health"
    }


# Startup event
@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info(f"Starting {settings.app_name} in {settings.environment} mode")
    logger.info(f"Allowed origins: {settings.allowed_origins}")

    if settings.storage_backend == "sql":
        from invest_tracker.database import create_tables
        await create_tables()
        logger.info("Database tables ready")
    if not settings.fmp_api_key:
        logger.info("FMP_API_KEY is not set; stock and ETF holdings will be priced from manual overrides only")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    close_redis_client()
    logger.info("Shutting down Investment Tracker API")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "invest_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower()
    )
