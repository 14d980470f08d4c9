"""
Registration orchestrator - one domain registration attempt end to end.

Flow
====

    validate ──invalid──> INVALID (all errors, nothing estimated or sent)
       │
    estimate gas (advisory, optional)
       │
    confirmed? ──no──> AWAITING_CONFIRMATION (estimate for display)
       │
    connect wallet (re-verify account and chain)
       │
    submit ──failure──> FAILED (error surfaced verbatim, never retried)
       │
    build metadata, record mint ──> SUCCEEDED (transaction hash + metadata)

submit() is never retried here. Blockchain failures are often
state-dependent, so retrying is a user decision. The orchestrator does not
serialize concurrent attempts for the same domain; uniqueness is enforced
by the registry contract.

The HTTP API only calls prepare_registration(): signing happens in the
user's browser wallet. register(), quote() and build_params() are the entry
points for a signing host that holds a WalletProvider, such as a dev node
or custodial signer wired through RpcWalletProvider.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .exceptions import (
    ConfigurationError,
    DomainAlreadyRegistered,
    RegistrationInvalid,
    WalletProviderError,
)
from .minting import GasEstimate, MintingParams, MintingPipeline
from .names import full_domain_name
from .ports import (
    IdentityResolver,
    ImageRenderer,
    MetadataRepository,
    RegistrationStatus,
    WalletProvider,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationForm:
    """Raw user input from the registration UI."""

    domain: str
    bio: str
    wallet_address: str
    farcaster_username: str | None = None
    social_links: str | None = None
    metadata_uri: str | None = None


@dataclass(frozen=True)
class WalletAccount:
    address: str
    chain_id: int


@dataclass
class RegistrationResult:
    status: RegistrationStatus
    errors: list[str] = field(default_factory=list)
    gas_estimate: GasEstimate | None = None
    transaction_hash: str | None = None
    metadata: dict[str, Any] | None = None
    error: str | None = None


@dataclass(frozen=True)
class PreparedRegistration:
    """Registration payload handed to a client wallet for signing."""

    domain: str
    owner: str
    farcaster_username: str
    fid: int
    bio: str
    social_links: str
    registered_at: str
    expires_at: str
    metadata_uri: str
    nft_metadata: dict[str, Any]
    contract_address: str
    chain_id: int
    rpc_url: str


@dataclass
class RegistrationOrchestrator:
    """
    Domain service coordinating identity, wallet and minting pipeline.

    The wallet is an injected capability provider, so any EIP-1193 source
    (browser bridge, JSON-RPC node, test fake) can drive a registration.
    """

    pipeline: MintingPipeline
    renderer: ImageRenderer
    metadata_repository: MetadataRepository | None = None
    identity_resolver: IdentityResolver | None = None
    marketplace_url: str = ""
    metadata_base_path: str = "/v1/metadata"

    def default_metadata_uri(self, domain: str) -> str:
        return f"{self.metadata_base_path}/{domain}"

    async def build_params(self, form: RegistrationForm, fid: int) -> MintingParams:
        """
        Combine form input with the resolved identity.

        The username falls back to the identity resolver when the form
        leaves it blank; the metadata URI falls back to the metadata endpoint.
        """
        username = form.farcaster_username
        if not username and self.identity_resolver is not None:
            user = await self.identity_resolver.get_authenticated_user_info(fid)
            if user is not None:
                username = user.username

        return MintingParams(
            domain=form.domain,
            bio=form.bio,
            farcaster_username=username or "",
            fid=fid,
            wallet_address=form.wallet_address,
            metadata_uri=form.metadata_uri or self.default_metadata_uri(form.domain),
            social_links=form.social_links,
        )

    async def connect_wallet(self, wallet: WalletProvider) -> WalletAccount:
        """
        Request the wallet's account and check it is on the registry chain.

        Raises:
            WalletProviderError: If unavailable, no account, or wrong chain
        """
        if not wallet.available:
            raise WalletProviderError("Wallet provider not available")

        accounts = await wallet.request("eth_requestAccounts", [])
        if not accounts or not isinstance(accounts, list):
            raise WalletProviderError("No accounts found")
        if not isinstance(accounts[0], str):
            raise WalletProviderError(f"Invalid account from wallet: {accounts[0]!r}")

        chain_id_hex = await wallet.request("eth_chainId", [])
        try:
            chain_id = int(chain_id_hex, 16)
        except (TypeError, ValueError) as e:
            raise WalletProviderError(f"Invalid chain id from wallet: {chain_id_hex!r}") from e

        if chain_id != self.pipeline.chain.chain_id:
            raise WalletProviderError(
                f"Wallet is on chain {chain_id}, expected {self.pipeline.chain.chain_id}"
            )

        return WalletAccount(address=accounts[0], chain_id=chain_id)

    async def quote(self, params: MintingParams) -> RegistrationResult:
        """Validate and estimate without touching the wallet."""
        validation = self.pipeline.validate(params)
        if not validation.valid:
            return RegistrationResult(RegistrationStatus.INVALID, errors=validation.errors)

        estimate = await self.pipeline.estimate_gas(params)
        return RegistrationResult(RegistrationStatus.AWAITING_CONFIRMATION, gas_estimate=estimate)

    async def register(
        self,
        params: MintingParams,
        wallet: WalletProvider,
        confirmed: bool = False,
        include_estimate: bool = True,
    ) -> RegistrationResult:
        """
        Run one registration attempt.

        Args:
            params: Validated-or-not minting parameters
            wallet: Signing capability used for submission
            confirmed: True only after the user explicitly confirmed
            include_estimate: Whether to fetch a gas estimate for display

        Returns:
            RegistrationResult; submission happens only when confirmed
        """
        validation = self.pipeline.validate(params)
        if not validation.valid:
            return RegistrationResult(RegistrationStatus.INVALID, errors=validation.errors)

        estimate = await self.pipeline.estimate_gas(params) if include_estimate else None
        if not confirmed:
            return RegistrationResult(
                RegistrationStatus.AWAITING_CONFIRMATION, gas_estimate=estimate
            )

        try:
            account = await self.connect_wallet(wallet)
        except WalletProviderError as e:
            return RegistrationResult(
                RegistrationStatus.FAILED, gas_estimate=estimate, error=str(e)
            )

        if account.address.lower() != params.wallet_address.lower():
            return RegistrationResult(
                RegistrationStatus.FAILED,
                gas_estimate=estimate,
                error="Connected wallet does not match the registration owner",
            )

        outcome = await self.pipeline.submit(params, wallet)
        if not outcome.success:
            return RegistrationResult(
                RegistrationStatus.FAILED,
                gas_estimate=estimate,
                transaction_hash=outcome.transaction_hash,
                error=outcome.error,
            )

        metadata = self.pipeline.build_metadata(params)
        self._record_mint(params, outcome.transaction_hash, metadata)
        return RegistrationResult(
            RegistrationStatus.SUCCEEDED,
            gas_estimate=estimate,
            transaction_hash=outcome.transaction_hash,
            metadata=metadata,
        )

    def prepare_registration(
        self, params: MintingParams, registered_at: datetime | None = None
    ) -> PreparedRegistration:
        """
        Build the payload a client wallet signs to register a domain.

        Raises:
            RegistrationInvalid: If any validation rule fails
            ConfigurationError: If the registry contract address is unset
            DomainAlreadyRegistered: If the domain has a minted record
        """
        validation = self.pipeline.validate(params)
        if not validation.valid:
            raise RegistrationInvalid(validation.errors)

        chain = self.pipeline.chain
        if not chain.contract_address:
            raise ConfigurationError("Contract not configured")

        full_domain = full_domain_name(params.domain, chain.domain_suffix)
        metadata = self.pipeline.build_metadata(params, registered_at)
        nft_metadata = {
            **metadata,
            "description": (
                f"Farcaster domain {full_domain} owned by @{params.farcaster_username} "
                f"(FID: {params.fid}) on Celo mainnet"
            ),
            "external_url": self.marketplace_url,
            "image": self.renderer.render(full_domain, f"FID {params.fid}"),
        }

        if self.metadata_repository is not None:
            stored = self.metadata_repository.save_pending(
                full_domain, params.wallet_address, nft_metadata
            )
            if not stored:
                raise DomainAlreadyRegistered(full_domain)

        return PreparedRegistration(
            domain=full_domain,
            owner=params.wallet_address,
            farcaster_username=params.farcaster_username,
            fid=params.fid,
            bio=params.bio,
            social_links=params.social_links or "",
            registered_at=metadata["registered_at"],
            expires_at=metadata["expires_at"],
            metadata_uri=params.metadata_uri,
            nft_metadata=nft_metadata,
            contract_address=chain.contract_address,
            chain_id=chain.chain_id,
            rpc_url=chain.rpc_url,
        )

    def _record_mint(
        self, params: MintingParams, transaction_hash: str | None, metadata: dict[str, Any]
    ) -> None:
        if self.metadata_repository is None or transaction_hash is None:
            return
        full_domain = full_domain_name(params.domain, self.pipeline.chain.domain_suffix)
        try:
            self.metadata_repository.mark_minted(full_domain, transaction_hash, metadata)
        except Exception:
            # The mint is already final on-chain; report success regardless
            logger.exception("Failed to record mint for %s (%s)", full_domain, transaction_hash)
