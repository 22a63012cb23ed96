"""
FastAPI application for cleaner availability and bookings
"""
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager

from bossofclean.config.settings import get_settings
from bossofclean.core.exceptions import DomainError
from bossofclean.core.middleware import correlation_id_middleware, request_logging_middleware
from bossofclean.core.monitoring import health_router
from bossofclean.api.v1.router import api_v1_router
from bossofclean.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    routes = [route for route in app.routes if isinstance(route, APIRoute)]
    logger.info(f"{settings.APP_NAME} starting up with {len(routes)} routes")
    logger.info(f"Wall-clock timezone: {settings.DEFAULT_TIMEZONE}")

    yield

    # Shutdown
    logger.info(f"{settings.APP_NAME} shutting down")


async def domain_error_handler(request: Request, exc: DomainError):
    """Turn service-layer errors into JSON responses"""
    logger.info(
        f"{exc.code}: {exc.message}",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "status_code": exc.status_code,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Boss of Clean Availability API",
        description="Cleaner availability, bookable slots and booking lifecycle",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(DomainError, domain_error_handler)

    # Include routers
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
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "bossofclean.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
