"""
FastAPI application for the BeautyBook booking core

Availability, race-safe booking creation and the booking lifecycle
"""
import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from beautybook.config.settings import get_settings
from beautybook.core.exceptions import BookingError
from beautybook.core.middleware import correlation_id_middleware, request_logging_middleware
from beautybook.core.monitoring import health_router
from beautybook.webhooks.router import webhook_router
from beautybook.api.v1.router import api_v1_router
from beautybook.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging()
    logger.info(f"🚀 {settings.APP_NAME} starting up (slot interval {settings.SLOT_INTERVAL_MINUTES}m)")
    yield
    logger.info(f"🛑 {settings.APP_NAME} shutting down...")


async def booking_error_handler(request: Request, exc: BookingError):
    """Render domain errors as {"error": code, "detail": message}"""
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    logger.info(f"[{correlation_id}] {request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="BeautyBook Booking API",
        description="Appointment availability, booking creation and booking lifecycle",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Last registered runs first, so the correlation ID exists before logging
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(BookingError, booking_error_handler)

    app.include_router(webhook_router, prefix="/webhooks", tags=["webhooks"])
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1", tags=["api"])

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "webhooks": "/webhooks/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "beautybook.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
