"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.crypto import CredentialCipher
from app.core.database import init_db, close_db
from app.core.logging import configure_logging, get_logger, set_request_context, clear_request_context
from app.core.exceptions import AppError, ErrorCode
from app.api import health, store

# Configure structured logging
configure_logging(
    log_level=settings.log_level,
    json_format=settings.log_format == "json",
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(
        "Starting Visiora backend...",
        extra={"version": settings.version, "environment": settings.environment},
    )

    # Fatal: no request may be served without a valid encryption key
    try:
        app.state.cipher = CredentialCipher(settings.encryption_key)
    except AppError as e:
        logger.critical(f"Invalid configuration: {e.message}")
        raise
    logger.info("Credential cipher initialized")

    try:
        await init_db()
        logger.info("Connected to database", extra={"url": settings.database_url.split("@")[-1]})
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise RuntimeError(f"Database initialization failed: {e}") from e

    logger.info(f"Health check available at: http://localhost:{settings.backend_port}/api/health")

    yield

    try:
        await close_db()
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")

    logger.info("Shutting down Visiora backend...")


# Create FastAPI app
app = FastAPI(
    title="Visiora API",
    description="Backend API for the Visiora merchant dashboard - Shopify orders, products and metrics",
    version=settings.version,
    lifespan=lifespan,
)


# ============ Exception Handlers ============


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle application errors with structured response."""
    if exc.http_status >= 500:
        logger.error(f"{exc.code.value}: {exc.message}", extra=exc.details)
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(include_details=not settings.is_production),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors in the same envelope as application errors."""
    if exc.status_code == 404:
        code, message = ErrorCode.RESOURCE_NOT_FOUND.value, "Route not found"
    else:
        code, message = "HTTP_ERROR", str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": code, "message": message}},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc!r}", exc_info=exc)
    response = JSONResponse(
        status_code=500,
        content={"error": {"code": ErrorCode.INTERNAL_ERROR.value, "message": "Something went wrong!"}},
    )
    # Rendered outside request_context_middleware, which never sees this response
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


# ============ Middleware ============


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============ Request Context Middleware ============


@app.middleware("http")
async def request_context_middleware(request: Request, call_next: Callable):
    """Add request context for logging."""
    request_id = set_request_context(
        request.headers.get("X-Request-ID"),
        user_id=request.query_params.get("userId"),
    )
    request.state.request_id = request_id

    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        clear_request_context()


# ============ Include Routers ============

app.include_router(health.router)
app.include_router(store.router)


# ============ Root Endpoint ============


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Visiora API",
        "version": settings.version,
        "status": "running",
        "environment": settings.environment,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
    )
