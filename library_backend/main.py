"""
Main application entry point.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from library_backend import __version__
from library_backend.api.v1.auth_endpoints import router as auth_router
from library_backend.api.v1.book_endpoints import router as book_router
from library_backend.api.v1.borrowing_endpoints import router as borrowing_router
from library_backend.api.v1.dependencies import get_catalog_service
from library_backend.api.v1.error_handlers import register_error_handlers
from library_backend.api.v1.health_endpoints import router as health_router
from library_backend.seed_data import DEFAULT_BOOKS

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SEED_CATALOG = os.getenv("SEED_CATALOG", "false").lower() in ("1", "true", "yes")

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if SEED_CATALOG:
        summary = get_catalog_service().seed_if_empty(DEFAULT_BOOKS)
        logger.info(f"Catalog seed: {summary}")
    yield


def create_app() -> FastAPI:
    """Build the FastAPI application with all routers and error handlers."""
    app = FastAPI(
        title="Library Lending API",
        description="Catalog, inventory and borrow/return workflow for a library.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    register_error_handlers(app)

    # Include API routers
    app.include_router(auth_router, prefix="/api/v1", tags=["auth"])
    app.include_router(book_router, prefix="/api/v1", tags=["books"])
    app.include_router(borrowing_router, prefix="/api/v1", tags=["borrowing"])
    app.include_router(health_router, prefix="/api/v1", tags=["health"])

    @app.get("/")
    def read_root():
        """Root endpoint."""
        return {
            "message": "Welcome to the Library Lending API",
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("library_backend.main:app", host="0.0.0.0", port=8000, reload=True)
