"""RentWise Rental Management Platform - Main Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.exceptions import RentWiseException
from .core.logging import (
    RequestIdMiddleware,
    get_logger,
    setup_logging,
    shutdown_logging,
)

# Import routers
from .modules.auth import router as auth_router
from .modules.auth import users_router
from .modules.property_management.routers import router as properties_router
from .modules.tenant_management.routers import router as tenants_router

logger = get_logger(__name__)

API_PREFIX = settings.api_prefix


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging()
    logger.info("Starting RentWise application...")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug mode: {settings.app_debug}")
    yield
    # Shutdown
    logger.info("Shutting down RentWise application...")
    shutdown_logging()


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description="Rental Property Management Platform",
    version=settings.api_version,
    docs_url=f"{API_PREFIX}/docs" if settings.app_debug else None,
    redoc_url=f"{API_PREFIX}/redoc" if settings.app_debug else None,
    openapi_url=f"{API_PREFIX}/openapi.json" if settings.app_debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware for request tracing
app.add_middleware(RequestIdMiddleware)


# Global exception handler
@app.exception_handler(RentWiseException)
async def rentwise_exception_handler(request: Request, exc: RentWiseException):
    """Handle RentWise-specific exceptions."""
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"path": request.url.path})
    else:
        logger.info(
            "Request rejected",
            extra={
                "path": request.url.path,
                "error_type": type(exc).__name__,
                "status_code": exc.status_code,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": {"type": type(exc).__name__, "details": exc.details},
            "data": None,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": str(exc) if settings.app_debug else "Internal server error",
            "data": None,
        },
    )


# Health check endpoint
@app.get(f"{API_PREFIX}/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.api_version,
        "env": settings.app_env,
    }


# Register routers under the configured prefix
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(properties_router, prefix=API_PREFIX)
app.include_router(tenants_router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rentwise_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_debug,
    )
