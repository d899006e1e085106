# tubescout/app/main.py
"""
FastAPI Main Application
TubeScout search service
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tubescout import __version__
from tubescout.app.config import get_config, validate_config
from tubescout.app.dependencies import build_services
from tubescout.api.routers import search_router
from tubescout.api.schemas import server_error_body

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Suggestion-expanded YouTube search with comment enrichment"


# ============================================================================
# Application Lifecycle Management
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Builds provider clients on startup and closes them on shutdown
    """
    # ========== STARTUP ==========
    config = get_config()
    logger.info(f"🚀 Starting {config.app.name} ({config.app.env})...")

    validation_result = validate_config(config)
    if not validation_result["valid"]:
        logger.error("❌ Configuration validation failed!")
        for error in validation_result["errors"]:
            logger.error(f"  - {error}")
        raise RuntimeError("Invalid configuration")

    for warning in validation_result["warnings"]:
        logger.warning(f"  ⚠️  {warning}")
    logger.debug(f"Configuration: {config.to_dict()}")

    app.state.services = build_services(config)
    logger.info("✅ Application startup complete")

    yield

    # ========== SHUTDOWN ==========
    logger.info("🛑 Shutting down application...")
    await app.state.services.aclose()
    logger.info("✅ Application shutdown complete")


# ============================================================================
# FastAPI Application Instance
# ============================================================================


def create_app() -> FastAPI:
    """
    FastAPI application factory
    Creates and configures the FastAPI application
    """
    config = get_config()

    app = FastAPI(
        title=config.app.name,
        description=config.get("app.description", DEFAULT_DESCRIPTION),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=config.api.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    _register_routers(app)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers; every error body is JSON"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        if exc.status_code >= 500:
            logger.error(f"HTTP error: {exc.status_code} - {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Handle validation errors"""
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request parameters", "details": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content=server_error_body(exc, expose_details=get_config().is_development),
        )


def _register_routers(app: FastAPI) -> None:
    """Register API routers"""

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint"""
        config = get_config()
        return {
            "status": "healthy",
            "version": __version__,
            "environment": config.app.env,
        }

    @app.get("/system/info", tags=["System"])
    async def system_info():
        """Configuration summary (no secrets)"""
        return {"config": get_config().get_summary()}

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API information"""
        return {
            "message": f"{get_config().app.name} API",
            "version": __version__,
            "search": "/search?q=<query>&suggestionCount=<0-10>&videoCount=<1-50>",
            "docs": "/docs",
            "health": "/health",
            "system": "/system/info",
        }

    app.include_router(search_router)


# ============================================================================
# Application Instance
# ============================================================================

app = create_app()


if __name__ == "__main__":
    from tubescout.app.server import main

    main()
