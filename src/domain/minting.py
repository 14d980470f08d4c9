"""
Minting pipeline - validate, estimate, submit and describe a domain mint.

Four independently callable steps:

1. validate(params)        pure; returns every violated rule at once
2. estimate_gas(params)    advisory; degrades to a fixed estimate on RPC failure
3. submit(params, wallet)  sends register() through the caller's wallet and
                           waits for the receipt; NOT idempotent
4. build_metadata(params)  pure; NFT metadata with a fixed one-year term

submit() sends at most one transaction per call. Callers must not resubmit
after an ambiguous failure (e.g. confirmation timeout) without first checking
the status of the returned transaction hash: a second submission mints a
duplicate or conflicting registration.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from eth_utils import is_address

from .contract import encode_register_call
from .exceptions import ChainRejection, NetworkError, WalletProviderError
from .names import MIN_DOMAIN_LENGTH, full_domain_name, validate_domain_name_format
from .ports import FeeOracle, WalletProvider

logger = logging.getLogger(__name__)

# Gas units for register() including metadata storage
REGISTER_GAS_UNITS = 150_000
FALLBACK_GAS_PRICE_WEI = 1_000_000_000  # 1 gwei
WEI_PER_NATIVE = Decimal(10**18)
REGISTRATION_TERM = timedelta(days=365)

_FIAT_QUANTUM = Decimal("0.0001")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChainConfig:
    """Where and how registrations are minted."""

    contract_address: str
    chain_id: int
    rpc_url: str
    domain_suffix: str


@dataclass(frozen=True)
class MintingParams:
    """Inputs to one registration attempt. Immutable once constructed."""

    domain: str
    bio: str
    farcaster_username: str
    fid: int
    wallet_address: str
    metadata_uri: str
    social_links: str | None = None


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GasEstimate:
    """
    Advisory cost of a register() call.

    The chain decides the fee actually charged; fiat conversion uses a
    fixed price.
    """

    estimated_gas_units: int
    gas_price_wei: int
    estimated_cost_native: Decimal
    estimated_cost_fiat: Decimal
    is_fallback: bool = False


@dataclass(frozen=True)
class TransactionReceipt:
    block_number: int
    gas_used: int
    status: str


@dataclass(frozen=True)
class TransactionOutcome:
    """
    Result of submit().

    success=True always carries transaction_hash; success=False always
    carries error, and carries transaction_hash only when a transaction was
    broadcast but not confirmed as successful.
    """

    success: bool
    transaction_hash: str | None = None
    receipt: TransactionReceipt | None = None
    error: str | None = None

    @classmethod
    def succeeded(cls, transaction_hash: str, receipt: TransactionReceipt) -> "TransactionOutcome":
        return cls(success=True, transaction_hash=transaction_hash, receipt=receipt)

    @classmethod
    def failed(cls, error: str, transaction_hash: str | None = None) -> "TransactionOutcome":
        return cls(success=False, transaction_hash=transaction_hash, error=error)


def _to_int(value: Any) -> int | None:
    """Parse a JSON-RPC quantity (hex string or integer)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value:
        try:
            return int(value, 16) if value.startswith(("0x", "0X")) else int(value)
        except ValueError:
            return None
    return None


@dataclass
class MintingPipeline:
    """
    Domain service for minting a registered domain as an NFT.

    Holds no mutable state; safe to call from concurrent requests.
    """

    fee_oracle: FeeOracle
    chain: ChainConfig
    native_fiat_price: Decimal = Decimal("2.0")
    receipt_poll_interval: float = 2.0
    receipt_timeout: float = 180.0
    clock: Callable[[], datetime] = _utcnow

    def validate(self, params: MintingParams) -> ValidationResult:
        """
        Check registration parameters.

        Every violated rule is reported, in a fixed order, so the same
        params always produce the same error list.
        """
        errors: list[str] = []

        if not params.domain or len(params.domain) < MIN_DOMAIN_LENGTH:
            errors.append(f"Domain must be at least {MIN_DOMAIN_LENGTH} characters")
        else:
            format_error = validate_domain_name_format(params.domain)
            if format_error:
                errors.append(format_error)

        fid = params.fid
        if isinstance(fid, bool) or not isinstance(fid, int) or fid <= 0:
            errors.append("Valid FID is required")

        if not params.farcaster_username:
            errors.append("Farcaster username is required")

        if not params.wallet_address or not is_address(params.wallet_address):
            errors.append("Valid wallet address is required")

        if not params.bio or len(params.bio) < 1:
            errors.append("Bio is required")

        if not params.metadata_uri:
            errors.append("Metadata URI is required")

        return ValidationResult(valid=not errors, errors=errors)

    async def estimate_gas(self, params: MintingParams | None = None) -> GasEstimate:
        """
        Estimate the cost of registering a domain.

        Never raises: if fee data cannot be fetched, a fixed fallback
        estimate at 1 gwei is returned.
        """
        try:
            gas_price = await self.fee_oracle.get_gas_price()
        except NetworkError as e:
            logger.warning("Fee data unavailable, using fallback estimate: %s", e)
            return self._estimate(FALLBACK_GAS_PRICE_WEI, is_fallback=True)

        if isinstance(gas_price, bool) or not isinstance(gas_price, int) or gas_price <= 0:
            gas_price = FALLBACK_GAS_PRICE_WEI
        return self._estimate(gas_price)

    async def submit(self, params: MintingParams, wallet: WalletProvider) -> TransactionOutcome:
        """
        Send the register() transaction through the wallet and await its receipt.

        Failures (invalid params, missing configuration, wallet errors,
        confirmation timeout, reverted receipt) come back as a failed outcome.
        """
        validation = self.validate(params)
        if not validation.valid:
            return TransactionOutcome.failed("; ".join(validation.errors))

        if not self.chain.contract_address:
            logger.error("Contract address not configured")
            return TransactionOutcome.failed("Contract address not configured")

        if not wallet.available:
            return TransactionOutcome.failed("Wallet provider not available")

        full_domain = full_domain_name(params.domain, self.chain.domain_suffix)
        logger.info(
            "Starting registration: domain=%s fid=%s wallet=%s",
            full_domain,
            params.fid,
            params.wallet_address,
        )

        transaction = {
            "from": params.wallet_address,
            "to": self.chain.contract_address,
            "data": encode_register_call(
                full_domain,
                params.wallet_address,
                params.bio,
                params.fid,
                params.metadata_uri,
            ),
            "value": "0x0",
        }

        try:
            transaction_hash = await wallet.request("eth_sendTransaction", [transaction])
        except WalletProviderError as e:
            logger.error("Transaction submission failed: %s", e)
            return TransactionOutcome.failed(str(e))

        if not transaction_hash or not isinstance(transaction_hash, str):
            return TransactionOutcome.failed("Wallet returned no transaction hash")

        logger.info("Transaction sent: %s", transaction_hash)

        # From here on the transaction is on the network; failures keep the hash
        try:
            receipt = await asyncio.wait_for(
                self._confirm(wallet, transaction_hash), timeout=self.receipt_timeout
            )
        except asyncio.TimeoutError:
            error = (
                f"Transaction {transaction_hash} was not confirmed "
                f"within {self.receipt_timeout:g}s"
            )
            logger.error(error)
            return TransactionOutcome.failed(error, transaction_hash=transaction_hash)
        except (WalletProviderError, ChainRejection) as e:
            logger.error("Transaction %s failed: %s", transaction_hash, e)
            return TransactionOutcome.failed(str(e), transaction_hash=transaction_hash)

        logger.info(
            "Transaction successful: block=%s gas_used=%s",
            receipt.block_number,
            receipt.gas_used,
        )
        return TransactionOutcome.succeeded(transaction_hash, receipt)

    def build_metadata(
        self, params: MintingParams, registered_at: datetime | None = None
    ) -> dict[str, Any]:
        """
        Build the NFT metadata document for a registration.

        Deterministic for a given registered_at; expiry is always one
        registration term (365 days) later.
        """
        registered_at = registered_at or self.clock()
        full_domain = full_domain_name(params.domain, self.chain.domain_suffix)
        return {
            "name": full_domain,
            "description": (
                f"Farcaster domain owned by @{params.farcaster_username} (FID: {params.fid})"
            ),
            "attributes": [
                {"trait_type": "Domain", "value": full_domain},
                {"trait_type": "Farcaster Username", "value": params.farcaster_username},
                {"trait_type": "Farcaster ID", "value": str(params.fid)},
                {"trait_type": "Owner", "value": params.wallet_address},
                {"trait_type": "Bio", "value": params.bio},
            ],
            "registered_at": registered_at.isoformat(),
            "expires_at": (registered_at + REGISTRATION_TERM).isoformat(),
        }

    def _estimate(self, gas_price_wei: int, is_fallback: bool = False) -> GasEstimate:
        cost_native = Decimal(REGISTER_GAS_UNITS * gas_price_wei) / WEI_PER_NATIVE
        cost_fiat = (cost_native * self.native_fiat_price).quantize(_FIAT_QUANTUM)
        return GasEstimate(
            estimated_gas_units=REGISTER_GAS_UNITS,
            gas_price_wei=gas_price_wei,
            estimated_cost_native=cost_native,
            estimated_cost_fiat=cost_fiat,
            is_fallback=is_fallback,
        )

    async def _confirm(self, wallet: WalletProvider, transaction_hash: str) -> TransactionReceipt:
        """
        Poll for the receipt until it is mined.

        Raises:
            ChainRejection: If the receipt status is not success
            WalletProviderError: If the wallet cannot be queried
        """
        while True:
            raw = await wallet.request("eth_getTransactionReceipt", [transaction_hash])
            if raw:
                break
            await asyncio.sleep(self.receipt_poll_interval)

        if not isinstance(raw, dict):
            raise WalletProviderError(f"Malformed transaction receipt: {raw!r}")
        if _to_int(raw.get("status")) != 1:
            raise ChainRejection("Transaction failed or was reverted")

        return TransactionReceipt(
            block_number=_to_int(raw.get("blockNumber")) or 0,
            gas_used=_to_int(raw.get("gasUsed")) or 0,
            status="success",
        )
