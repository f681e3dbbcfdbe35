# =====================================================
# FILE: contractflow/main.py
# FastAPI application
# =====================================================

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from contractflow import __version__
from contractflow.core.config import settings
from contractflow.core.database import get_db, init_db
from contractflow.core.logging_config import configure_logging
from contractflow.middleware.request_logging import RequestLoggingMiddleware
from contractflow.services.navigation_service import NavigationState
from contractflow.api.api_v1.blueprints import router as blueprints_router
from contractflow.api.api_v1.contracts import router as contracts_router
from contractflow.api.api_v1.navigation import router as navigation_router

logger = logging.getLogger(__name__)


def create_app(init_database: bool = True) -> FastAPI:
    """Build the API application"""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_database:
            init_db()
        logger.info(f"{settings.APP_NAME} {__version__} started")
        yield

    app = FastAPI(
        title=settings.APP_NAME,
        version=__version__,
        description="Blueprint-based contract lifecycle management",
        lifespan=lifespan,
    )

    # One navigation state per application instance
    app.state.navigation = NavigationState()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(blueprints_router)
    app.include_router(contracts_router)
    app.include_router(navigation_router)

    @app.get("/health", tags=["health"])
    async def health(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
            database = "connected"
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {str(e)}")
            database = "unavailable"
        return {
            "status": "healthy" if database == "connected" else "degraded",
            "database": database,
            "version": __version__,
        }

    return app


app = create_app()


def run():
    """Console entry point: serve the API with uvicorn"""
    import uvicorn

    uvicorn.run(
        "contractflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
