"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Long-lived resources (pool, RPC clients, cache, limiter) are created
during app lifespan startup and stored in app.state.
"""

from decimal import Decimal

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.chain.rpc import Web3FeeOracle
from src.adapters.images.url import UrlImageRenderer
from src.adapters.repository.postgres import PostgresMetadataRepository
from src.config.settings import get_settings
from src.domain.cache import RateLimiter, ResponseCache
from src.domain.frame import FrameStateMachine
from src.domain.minting import ChainConfig, MintingPipeline
from src.domain.registration import RegistrationOrchestrator


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_metadata_repository(request: Request) -> PostgresMetadataRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresMetadataRepository(pool)


def get_fee_oracle(request: Request) -> Web3FeeOracle:
    return request.app.state.fee_oracle


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_image_renderer() -> UrlImageRenderer:
    return UrlImageRenderer(get_settings().app_url)


def get_chain_config() -> ChainConfig:
    settings = get_settings()
    return ChainConfig(
        contract_address=settings.contract_address,
        chain_id=settings.chain_id,
        rpc_url=settings.rpc_url,
        domain_suffix=settings.domain_suffix,
    )


def get_frame_machine() -> FrameStateMachine:
    """Create the frame state machine from settings (stateless, cheap to build)."""
    settings = get_settings()
    return FrameStateMachine(
        renderer=get_image_renderer(),
        app_url=settings.app_url,
        post_url=settings.frame_post_url,
        marketplace_url=settings.marketplace_url,
        domain_suffix=settings.domain_suffix,
    )


def get_minting_pipeline(request: Request) -> MintingPipeline:
    """Create minting pipeline with the shared fee oracle."""
    settings = get_settings()
    return MintingPipeline(
        fee_oracle=get_fee_oracle(request),
        chain=get_chain_config(),
        native_fiat_price=Decimal(str(settings.native_fiat_price)),
        receipt_poll_interval=settings.receipt_poll_interval_seconds,
        receipt_timeout=settings.receipt_timeout_seconds,
    )


def get_registration_orchestrator(request: Request) -> RegistrationOrchestrator:
    """
    Create registration orchestrator with injected dependencies.

    Wires together the minting pipeline, image renderer and metadata repository.
    """
    return RegistrationOrchestrator(
        pipeline=get_minting_pipeline(request),
        renderer=get_image_renderer(),
        metadata_repository=get_metadata_repository(request),
        marketplace_url=get_settings().marketplace_url,
    )
