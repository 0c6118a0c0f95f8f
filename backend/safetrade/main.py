"""
FastAPI application entry point.

WHAT: The collaborator service behind the meeting agreement wizard
WHY: Wizards on both sides of a conversation share one deal agreement record
HOW: App factory wiring lifespan (schema + optional catalog seed), CORS, handlers, v1 routes
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.router import api_router
from .core.config import settings
from .core.database import close_db, init_db
from .middleware.error_handler import register_exception_handlers
from .services import safe_zone_service
from .utils.logger import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables (and the demo catalog when enabled) before serving."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    init_db()
    if settings.SEED_SAFE_ZONES_ON_STARTUP:
        seeded = safe_zone_service.seed_safe_zones()
        logger.info(f"Safe zone catalog: {seeded['inserted']} inserted, {seeded['total']} total")

    yield

    close_db()
    logger.info(f"{settings.APP_NAME} stopped")


def create_app() -> FastAPI:
    """
    Build the FastAPI application.

    Returns:
        App with CORS for the wizard hosts, business error handlers and /api/v1 routes
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Deal agreements, privacy reveal and safe-zone catalog for marketplace meetups",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)
    application.include_router(api_router)

    @application.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("safetrade.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
