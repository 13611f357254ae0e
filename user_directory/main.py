# 📄 File: user_directory/main.py
#
# 🧭 Purpose (Layman Explanation):
# The main control center that starts the user directory, opens the configured storage,
# connects all the parts together, and shuts everything down cleanly at the end.
#
# 🧪 Purpose (Technical Summary):
# FastAPI application factory and entry point: lifespan-managed record store (built from
# settings or injected), middleware setup, router registration, and exception handlers
# mapping domain errors to HTTP status codes.
#
# 🔗 Dependencies:
# - FastAPI framework, uvicorn
# - user_directory.shared.config.settings
# - user_directory.modules.user_management (store factory, directory service)
#
# 🔄 Connected Modules / Calls From:
# - uvicorn server startup
# - Docker container entry point
# - Test suite (create_application with an injected store)

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from user_directory.api.middleware.logging import RequestLoggingMiddleware
from user_directory.api.v1.router import api_router
from user_directory.modules.user_management.domain.repositories.user_record_store import (
    UserRecordStore,
)
from user_directory.modules.user_management.domain.services.user_service import (
    UserDirectoryService,
)
from user_directory.modules.user_management.infrastructure.factory import build_user_record_store
from user_directory.shared.config.settings import Settings, get_settings
from user_directory.shared.core.exceptions import (
    DirectoryException,
    ValidationError,
    exception_to_dict,
    is_client_error,
)
from user_directory.shared.utils.logging import (
    log_shutdown_event,
    log_startup_event,
    setup_logging,
)

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def create_application(
    settings: Optional[Settings] = None,
    store: Optional[UserRecordStore] = None,
) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Application settings (defaults to the cached singleton)
        store: Pre-built record store; when omitted one is built from
            ``settings.STORAGE_BACKEND`` at startup

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan context manager.

        Connects the record store at startup, exposes the directory service
        on app.state, and closes the store on shutdown.
        """
        setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
        log_startup_event(
            settings.APP_NAME,
            settings.APP_VERSION,
            extra={"storage_backend": settings.STORAGE_BACKEND},
        )

        record_store = store or build_user_record_store(settings)

        try:
            await record_store.connect()
        except Exception as e:
            logger.error(f"❌ Startup failed: {e}")
            raise

        app.state.store = record_store
        app.state.directory_service = UserDirectoryService(
            record_store,
            register_requires_phone=settings.REGISTER_REQUIRES_PHONE,
            read_timeout=settings.FANOUT_READ_TIMEOUT_SECONDS,
        )
        logger.info(f"✅ Record store connected ({record_store.backend_name})")

        try:
            yield
        finally:
            app.state.directory_service = None
            try:
                await record_store.close()
                logger.info("✅ Record store closed")
            except Exception as e:
                logger.error(f"❌ Shutdown error: {e}")
            log_shutdown_event(settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    if not settings.is_testing:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(api_router)

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(DirectoryException)
    async def directory_exception_handler(request: Request, exc: DirectoryException) -> JSONResponse:
        """Handle domain exceptions raised by the directory service."""
        if is_client_error(exc):
            logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code} {exc.message}")
        else:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error_code} {exc.message}")

        return JSONResponse(
            status_code=exc.status_code,
            content=exception_to_dict(exc, _request_id(request)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies are client errors (400)."""
        error = ValidationError(
            message="Request body could not be decoded",
            details={"errors": [
                {"loc": list(item.get("loc", ())), "msg": item.get("msg")}
                for item in exc.errors()
            ]},
        )
        return JSONResponse(
            status_code=error.status_code,
            content=exception_to_dict(error, _request_id(request)),
        )

    @app.exception_handler(Exception)
    async def internal_server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle 500 Internal Server Error."""
        logger.error(f"Internal server error: {exc}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content=exception_to_dict(exc, _request_id(request), include_type=settings.DEBUG),
        )

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "description": settings.APP_DESCRIPTION,
            "storage_backend": settings.STORAGE_BACKEND,
            "docs_url": "/docs" if settings.DEBUG else None,
            "health_check": "/health",
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        """Favicon endpoint to prevent 404 errors."""
        return Response(status_code=204)

    return app


# Create the FastAPI application
app = create_application()


def main():
    """
    Main function for running the application.

    Used when running ``python -m user_directory.main`` or the
    ``user-directory`` console script.
    """
    settings = get_settings()
    uvicorn.run(
        "user_directory.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD and settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
        workers=1 if settings.RELOAD else settings.WORKERS,
    )


if __name__ == "__main__":
    main()
