"""
Tally Backend Application

Live survey tallying: participants answer a fixed questionnaire and every
connected viewer sees the aggregate counts update in near real time.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router as api_router
from api.routes.live import router as live_router
from core.config import settings
from core.events import create_start_app_handler, create_stop_app_handler
from core.exceptions import SurveyError
from schemas.survey import HealthResponse

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    await create_start_app_handler(app)()
    yield
    # Shutdown
    await create_stop_app_handler(app)()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        description="Live survey tallying with real-time broadcast of aggregate counts",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    # Include routers
    application.include_router(api_router, prefix="/api")
    application.include_router(live_router, tags=["Live"])

    @application.exception_handler(SurveyError)
    async def survey_exception_handler(request: Request, exc: SurveyError) -> JSONResponse:
        """Map domain errors to their status code with a plain ``error`` message."""
        if exc.status_code >= 500:
            logger.error("request_failed", error=exc.message, path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed or mistyped JSON bodies are client errors, reported like any other."""
        logger.info("request_body_invalid", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler to catch unhandled exceptions.

        Ensures the response still passes through the CORS middleware and
        keeps the ``{"error": ...}`` shape.
        """
        logger.exception(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred"},
        )

    @application.get("/api/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint reporting which store this process runs on."""
        return HealthResponse(
            status="OK",
            timestamp=datetime.now(timezone.utc),
            database=request.app.state.store.mode,
        )

    @application.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": "1.0.0",
            "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
        }

    return application


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
