"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from app.config import settings
from app.database import Database
from app.services.background_removal import BackgroundRemover, SimulatedBackgroundRemover

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    database_url: Optional[str] = None,
    background_remover: Optional[BackgroundRemover] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        database_url: SQLAlchemy async URL, defaults to settings.DATABASE_URL
        background_remover: Removal provider, defaults to the simulated one

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info("Starting image job service...")

        if database_url is None:
            settings.ensure_directories()
        database = Database(database_url or settings.DATABASE_URL)
        await database.init()

        app.state.database = database
        app.state.background_remover = background_remover or SimulatedBackgroundRemover()

        yield

        logger.info("Shutting down image job service...")
        await database.dispose()

    app = FastAPI(
        title="Image Background Removal Service",
        description="Upload images and track background removal jobs",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add GZip Middleware
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from app.routes import files, jobs

    app.include_router(files.router, prefix="/api/files", tags=["files"])
    app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
