"""
API v1 routes.

Defines the frame protocol endpoints and the registration endpoints:
- GET  /v1/frame                - Frame entry document (HTML meta tags)
- POST /v1/frame                - Frame button callback
- POST /v1/register             - Prepare a registration for client signing
- GET  /v1/gas-estimate         - Advisory registration cost
- GET  /v1/domains/suggestions  - Candidate domain labels for a user
- GET  /v1/metadata/{domain}    - NFT metadata document
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from src.adapters.repository.postgres import PostgresMetadataRepository
from src.api.dependencies import (
    get_frame_machine,
    get_metadata_repository,
    get_minting_pipeline,
    get_rate_limiter,
    get_registration_orchestrator,
    get_response_cache,
)
from src.api.frame_page import render_frame_document
from src.api.models import (
    DomainSuggestionsResponse,
    ErrorResponse,
    FrameActionRequest,
    FrameResponseModel,
    GasEstimateResponse,
    PrepareRegistrationResponse,
    RegisterDomainRequest,
    UntrustedData,
    ValidationErrorResponse,
)
from src.config.settings import get_settings
from src.domain.cache import RateLimiter, ResponseCache
from src.domain.exceptions import (
    ConfigurationError,
    DomainAlreadyRegistered,
    RegistrationInvalid,
)
from src.domain.frame import FrameEvent, FrameStateMachine
from src.domain.minting import MintingParams, MintingPipeline
from src.domain.names import full_domain_name, generate_domain_suggestions
from src.domain.registration import RegistrationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

GAS_ESTIMATE_CACHE_KEY = "gas-estimate"

_NO_CACHE_HEADERS = {"Cache-Control": "max-age=0, no-cache, no-store, must-revalidate"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "/frame",
    response_class=HTMLResponse,
    summary="Frame entry document",
    description="HTML document carrying fc:frame meta tags for the home screen.",
)
async def frame_document(
    machine: FrameStateMachine = Depends(get_frame_machine),
) -> HTMLResponse:
    html = render_frame_document(get_settings().app_url, machine.initial())
    return HTMLResponse(content=html, headers=_NO_CACHE_HEADERS)


@router.post(
    "/frame",
    response_model=FrameResponseModel,
    response_model_exclude_none=True,
    summary="Handle a frame button press",
    description="Always answers 200 with a renderable frame; "
    "malformed callbacks get the fallback home screen.",
)
async def frame_action(
    request: Request,
    machine: FrameStateMachine = Depends(get_frame_machine),
) -> FrameResponseModel:
    """
    Advance the frame by one button press.

    The body is parsed here rather than by FastAPI so that malformed
    callbacks still receive a frame instead of a 4xx.
    """
    try:
        action = FrameActionRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Malformed frame callback, rendering fallback: %s", e)
        return FrameResponseModel.from_frame(machine.fallback())

    data = action.untrusted_data or UntrustedData()
    event = FrameEvent(button_index=data.button_index, input_text=data.input_text, fid=data.fid)
    return FrameResponseModel.from_frame(machine.handle(data.state, event))


@router.post(
    "/register",
    response_model=PrepareRegistrationResponse,
    responses={
        400: {"model": ValidationErrorResponse, "description": "Missing or invalid fields"},
        409: {"model": ErrorResponse, "description": "Domain already registered"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
        500: {"model": ErrorResponse, "description": "Contract not configured"},
    },
    summary="Prepare a domain registration",
    description="Validate registration fields and return the payload, contract address, "
    "chain id and RPC endpoint the client wallet needs to sign the mint.",
)
async def register(
    request_data: RegisterDomainRequest,
    request: Request,
    orchestrator: RegistrationOrchestrator = Depends(get_registration_orchestrator),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> PrepareRegistrationResponse | JSONResponse:
    """
    Prepare a registration for signing.

    - **domain**: Domain label (suffix is appended)
    - **fid**: Farcaster ID (positive integer)
    - **walletAddress**: Owner address
    """
    client_key = request.client.host if request.client else "anonymous"
    if not limiter.check(f"register:{client_key}").allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
        )

    params = MintingParams(
        domain=request_data.domain,
        bio=request_data.bio,
        farcaster_username=request_data.farcaster_username,
        fid=request_data.fid,
        wallet_address=request_data.wallet_address,
        metadata_uri=request_data.metadata_uri
        or orchestrator.default_metadata_uri(request_data.domain),
        social_links=request_data.social_links,
    )

    try:
        prepared = orchestrator.prepare_registration(params)
    except RegistrationInvalid as e:
        body = ValidationErrorResponse(detail="Invalid registration request", errors=e.errors)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())
    except DomainAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Domain already registered",
        ) from None
    except ConfigurationError:
        logger.error("Registration requested but contract address is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Contract not configured",
        ) from None

    return PrepareRegistrationResponse.from_prepared(prepared, timestamp=_now())


@router.get(
    "/gas-estimate",
    response_model=GasEstimateResponse,
    summary="Estimate registration cost",
    description="Advisory cost of a register() call. Falls back to a fixed "
    "estimate when fee data is unavailable.",
)
async def gas_estimate(
    pipeline: MintingPipeline = Depends(get_minting_pipeline),
    cache: ResponseCache = Depends(get_response_cache),
) -> GasEstimateResponse:
    cached = cache.get(GAS_ESTIMATE_CACHE_KEY)
    if cached is not None:
        return cached

    estimate = await pipeline.estimate_gas()
    response = GasEstimateResponse.from_estimate(estimate, timestamp=_now())
    if not estimate.is_fallback:
        cache.set(GAS_ESTIMATE_CACHE_KEY, response, get_settings().gas_cache_ttl_seconds)
    return response


@router.get(
    "/domains/suggestions",
    response_model=DomainSuggestionsResponse,
    summary="Suggest domain labels",
)
async def domain_suggestions(
    username: str = Query(..., min_length=1),
    fid: int = Query(..., gt=0),
    limit: int = Query(5, ge=1, le=10),
) -> DomainSuggestionsResponse:
    return DomainSuggestionsResponse(
        suggestions=generate_domain_suggestions(username, fid, limit=limit)
    )


@router.get(
    "/metadata/{domain}",
    responses={404: {"model": ErrorResponse, "description": "No metadata for domain"}},
    summary="NFT metadata document",
)
async def domain_metadata(
    domain: str,
    repository: PostgresMetadataRepository = Depends(get_metadata_repository),
) -> dict:
    suffix = get_settings().domain_suffix
    full_domain = domain if domain.endswith(f".{suffix}") else full_domain_name(domain, suffix)

    metadata = repository.get_metadata(full_domain)
    if metadata is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Metadata not found",
        )
    return metadata
