"""
FastAPI application entry point for the Stats Query API.

Configures logging and CORS, registers the API routers and the
InvalidQueryParameter handler, and manages the database pool lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stats_backend import __version__
from stats_backend.api import api_router
from stats_backend.api.stats import invalid_query_parameter_handler
from stats_backend.core.config import get_settings
from stats_backend.core.database import init_db, close_db
from stats_backend.core.errors import InvalidQueryParameter

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup the database pool is initialized; on shutdown it is closed.
    """
    logger.info("Stats Query API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # Continue startup; the pool is created lazily on first use

    yield

    logger.info("Stats Query API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Stats Query API",
    version=__version__,
    description=(
        "Normalizes dashboard stats parameters (period, date range, interval, "
        "filters, comparisons, imported data eligibility) into resolved queries."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(InvalidQueryParameter, invalid_query_parameter_handler)

app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "stats_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
