"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.chain.rpc import Web3FeeOracle
from src.adapters.repository.postgres import run_migrations
from src.api.errors import install_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.cache import RateLimiter, ResponseCache

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Farcaster Names API v1 - Frame interactions and domain NFT registration",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations on startup
    - Creates the fee oracle, response cache and rate limiter
    - Closes the pool and RPC session on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    if not settings.contract_address:
        logger.warning("CONTRACT_ADDRESS is not set; registration preparation will fail")

    # Store shared resources in app state for dependency injection
    app.state.pool = pool
    app.state.fee_oracle = Web3FeeOracle(settings.rpc_url)
    app.state.cache = ResponseCache()
    app.state.rate_limiter = RateLimiter(
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await app.state.fee_oracle.close()
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="farcaster-names",
    description="Register .farcaster.celo domains as NFTs from a web app or a Farcaster frame",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

install_exception_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}
