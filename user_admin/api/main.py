"""
FastAPI main application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from user_admin.api.routes import users
from user_admin.clients.base import FetchError
from user_admin.clients.users import UserClient
from user_admin.core.config import settings
from user_admin.core.logging import get_logger, setup_logging

# Setup logging on import
setup_logging()

logger = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Opens the users backend client on startup and closes it on shutdown.
    """
    logger.info(
        "Starting User Admin API",
        extra={
            "version": VERSION,
            "environment": settings.app_env,
            "backend": settings.api_base_url,
        },
    )

    app.state.user_client = UserClient()

    yield

    logger.info("Shutting down User Admin API")
    await app.state.user_client.close()


app = FastAPI(
    title="User Admin API",
    description="Admin interface for listing, editing and exporting users of the users backend",
    version=VERSION,
    docs_url="/docs" if settings.enable_api_docs else None,
    redoc_url="/redoc" if settings.enable_api_docs else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users.router, prefix="/api/users", tags=["users"])


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe; does not contact the users backend."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": VERSION,
        "environment": settings.app_env,
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Service info and where to find the users endpoints."""
    return {
        "message": "User Admin API",
        "version": VERSION,
        "users": "/api/users",
        "docs": "/docs" if settings.enable_api_docs else "disabled",
    }


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
    """
    Backend failures become 502; the backend's own error body is not relayed.
    """
    logger.error(
        "Backend request failed",
        extra={
            "path": str(request.url),
            "method": request.method,
            "error": str(exc),
            "backend_status": exc.status_code,
        },
    )

    return JSONResponse(
        status_code=502,
        content={
            "error": "Backend request failed",
            "message": str(exc),
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else is a 500; details only leak in debug mode."""
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )
