"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Wire field names are camelCase to match the frame protocol and web client.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.frame import FrameResponse
from src.domain.minting import GasEstimate
from src.domain.registration import PreparedRegistration


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting snake_case too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UntrustedData(CamelModel):
    """Client-supplied frame callback fields. Nothing here is authenticated."""

    fid: int | None = None
    button_index: int | None = None
    input_text: str | None = None
    state: str | None = None


class FrameActionRequest(CamelModel):
    """Signed POST callback sent by the frame host on a button press."""

    untrusted_data: UntrustedData | None = None
    trusted_data: dict[str, Any] | None = None


class FrameButtonModel(BaseModel):
    label: str
    action: str
    target: str | None = None


class FrameResponseModel(CamelModel):
    """Frame descriptor returned for every callback, including failures."""

    image: str
    buttons: list[FrameButtonModel]
    post_url: str
    state: str

    @classmethod
    def from_frame(cls, frame: FrameResponse) -> "FrameResponseModel":
        return cls(
            image=frame.image,
            buttons=[
                FrameButtonModel(label=b.label, action=b.action.value, target=b.target)
                for b in frame.buttons
            ],
            post_url=frame.post_url,
            state=frame.state,
        )


class RegisterDomainRequest(CamelModel):
    """Request model for registration preparation."""

    domain: str = Field(..., description="Domain label without suffix")
    bio: str = ""
    social_links: str | None = None
    farcaster_username: str
    fid: int
    wallet_address: str
    metadata_uri: str | None = Field(default=None, alias="metadataURI")


class RegistrationPayload(CamelModel):
    domain: str
    owner: str
    farcaster_username: str
    fid: int
    bio: str
    social_links: str
    registered_at: str
    expires_at: str
    metadata_uri: str = Field(alias="metadataURI")
    nft_metadata: dict[str, Any]


class PrepareRegistrationResponse(CamelModel):
    """Response model for a prepared registration, ready for client signing."""

    success: bool = True
    registration: RegistrationPayload
    contract_address: str
    chain_id: int
    rpc_url: str
    timestamp: str
    message: str = "Prepare to sign transaction with your wallet"

    @classmethod
    def from_prepared(
        cls, prepared: PreparedRegistration, timestamp: str
    ) -> "PrepareRegistrationResponse":
        return cls(
            registration=RegistrationPayload(
                domain=prepared.domain,
                owner=prepared.owner,
                farcaster_username=prepared.farcaster_username,
                fid=prepared.fid,
                bio=prepared.bio,
                social_links=prepared.social_links,
                registered_at=prepared.registered_at,
                expires_at=prepared.expires_at,
                metadata_uri=prepared.metadata_uri,
                nft_metadata=prepared.nft_metadata,
            ),
            contract_address=prepared.contract_address,
            chain_id=prepared.chain_id,
            rpc_url=prepared.rpc_url,
            timestamp=timestamp,
        )


class GasEstimateResponse(CamelModel):
    """Advisory registration cost. Wei amounts are strings to survive JSON clients."""

    estimated_gas_units: int
    gas_price_wei: str
    estimated_cost_native: str
    estimated_cost_fiat: str
    is_fallback: bool
    timestamp: str

    @classmethod
    def from_estimate(cls, estimate: GasEstimate, timestamp: str) -> "GasEstimateResponse":
        return cls(
            estimated_gas_units=estimate.estimated_gas_units,
            gas_price_wei=str(estimate.gas_price_wei),
            estimated_cost_native=str(estimate.estimated_cost_native),
            estimated_cost_fiat=str(estimate.estimated_cost_fiat),
            is_fallback=estimate.is_fallback,
            timestamp=timestamp,
        )


class DomainSuggestionsResponse(BaseModel):
    suggestions: list[str]


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str


class ValidationErrorResponse(BaseModel):
    """Error response listing every violated rule."""

    detail: str
    errors: list[str]
