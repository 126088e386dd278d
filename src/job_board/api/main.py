"""Main FastAPI application for the Job Board."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from job_board import __version__
from job_board.api.models import ErrorResponse
from job_board.api.routes import all_routers
from job_board.config import Settings, settings
from job_board.core.errors import InternalError, JobBoardError
from job_board.core.identity import TokenIdentityProvider
from job_board.db.database import Database
from job_board.storage.blob import BlobStorageClient
from job_board.utils.logging import configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Job Board API")

    try:
        app.state.database.create_all()
        logger.info("Application startup completed successfully")
    except Exception as e:
        logger.error("Application startup failed", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down Job Board API")

    try:
        await app.state.storage.close()
        app.state.database.dispose()
        logger.info("Application shutdown completed successfully")
    except Exception as e:
        logger.error("Application shutdown error", error=str(e))


def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    storage: Optional[BlobStorageClient] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.app_name,
        description="Job postings, applications and applicant review",
        version=__version__,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=lifespan
    )

    app.state.settings = app_settings
    app.state.database = database or Database(app_settings.database_url, echo=app_settings.database_echo)
    app.state.identity = TokenIdentityProvider(
        app_settings.jwt_secret_key,
        algorithm=app_settings.jwt_algorithm,
        expiration_hours=app_settings.jwt_expiration_hours,
    )
    app.state.storage = storage or BlobStorageClient(
        cloud_name=app_settings.cloudinary_cloud_name,
        api_key=app_settings.cloudinary_api_key,
        api_secret=app_settings.cloudinary_api_secret,
        base_url=app_settings.storage_base_url,
        timeout=app_settings.storage_timeout,
    )

    # Add middleware
    setup_middleware(app, app_settings)

    # Add exception handlers
    setup_exception_handlers(app, app_settings)

    # Include routers
    for router in all_routers:
        app.include_router(router, prefix="/api/v1")

    # Add root endpoint
    @app.get("/")
    async def root():
        return {
            "name": app_settings.app_name,
            "version": __version__,
            "status": "running",
            "docs": "/docs" if app_settings.debug else "disabled"
        }

    return app


def setup_middleware(app: FastAPI, app_settings: Settings) -> None:
    """Setup application middleware."""

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Trusted host middleware
    if app_settings.allowed_hosts:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=app_settings.allowed_hosts
        )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = asyncio.get_event_loop().time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            duration = asyncio.get_event_loop().time() - start_time
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_seconds=duration
            )

            return response

        except Exception as e:
            duration = asyncio.get_event_loop().time() - start_time

            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_seconds=duration
            )
            raise


def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc)
        ).model_dump(mode="json")
    )


def setup_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """Setup global exception handlers."""

    @app.exception_handler(JobBoardError)
    async def job_board_exception_handler(request: Request, exc: JobBoardError):
        if isinstance(exc, InternalError):
            logger.error(
                "Internal error",
                error=exc.error,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
                path=request.url.path
            )
            return _error_response(exc.status_code, exc.error, exc.message)

        logger.warning(
            "Request rejected",
            status_code=exc.status_code,
            error=exc.error,
            message=exc.message,
            path=request.url.path
        )
        return _error_response(exc.status_code, exc.error, exc.message, exc.details())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        field_errors = {}
        for err in exc.errors():
            # Drop the leading "body"/"query" segment
            key = ".".join(str(p) for p in err.get("loc", ())[1:]) or "__root__"
            field_errors.setdefault(key, []).append(err.get("msg", "Invalid value"))

        logger.warning(
            "Validation error",
            field_errors=field_errors,
            path=request.url.path
        )

        return _error_response(
            422,
            "ValidationFailed",
            "Request validation failed",
            {"field_errors": field_errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path
        )

        return _error_response(exc.status_code, "HTTPException", str(exc.detail or "Request failed"))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path
        )

        return _error_response(
            500,
            "InternalError",
            "An unexpected error occurred",
            {"error_type": type(exc).__name__} if app_settings.debug else None,
        )


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "job_board.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None  # Use our custom logging
    )
