"""
Certify FastAPI application entry point.

Flow: indicator answers → reconcile → normalize → aggregate → classify → score audit
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from certify import __version__
from certify.config import get_settings
from certify.db.session import check_db_connection, engine

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Certify starting")
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        # A missing or malformed catalog must stop startup, not fail the first save.
        try:
            from certify.catalog.loader import get_catalog

            catalog = get_catalog()
            logger.info(
                "Indicator catalog %s validated: %d indicators",
                catalog.version,
                len(catalog.indicators),
            )
        except Exception as e:
            logger.critical("Indicator catalog validation failed at startup: %s", e)
            raise

        yield
    finally:
        logger.info("Certify shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    from certify.api.applications import router as applications_router
    from certify.api.scoring import router as scoring_router

    app.include_router(applications_router, prefix="/api/applications", tags=["applications"])
    app.include_router(scoring_router, prefix="/api/scoring", tags=["scoring"])

    @app.get("/health")
    def health() -> dict:
        """Liveness plus database reachability."""
        from fastapi.responses import JSONResponse
        from sqlalchemy.exc import SQLAlchemyError

        try:
            check_db_connection()
        except SQLAlchemyError as exc:
            logger.warning("Health check: database unreachable: %s", exc)
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "version": __version__, "database": "disconnected"},
            )
        return {"status": "ok", "version": __version__, "database": "connected"}

    return app


app = create_app()
