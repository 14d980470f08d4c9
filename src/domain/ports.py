"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols structurally;
tests substitute fakes for any of them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class RegistrationStatus(str, Enum):
    """
    Outcome of a single orchestrated registration attempt.

    - INVALID: validation failed, nothing was estimated or submitted
    - AWAITING_CONFIRMATION: parameters valid, user has not confirmed yet
    - SUCCEEDED: transaction confirmed with a success receipt
    - FAILED: submission failed (wallet, network or chain rejection)
    """

    INVALID = "invalid"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class UserInfo:
    """Social identity as returned by the identity resolver."""

    fid: int
    username: str
    display_name: str = ""
    pfp_url: str = ""
    bio: str = ""
    follower_count: int = 0
    following_count: int = 0


class WalletProvider(Protocol):
    """
    Port interface for an EIP-1193 shaped signing capability.

    Must support eth_requestAccounts, eth_chainId, eth_sendTransaction
    and eth_getTransactionReceipt.
    """

    @property
    def available(self) -> bool:
        """True when the provider can accept requests."""
        ...

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Forward a JSON-RPC request to the wallet.

        Raises:
            WalletProviderError: If the wallet rejects or cannot serve the request
        """
        ...


class FeeOracle(Protocol):
    """Port interface for current network fee data."""

    async def get_gas_price(self) -> int | None:
        """
        Return the current gas price in wei.

        Raises:
            NetworkError: If the RPC node cannot be reached
        """
        ...


class IdentityResolver(Protocol):
    """Port interface for social identity lookup."""

    async def get_authenticated_user_info(self, fid: int) -> UserInfo | None:
        """Return the identity behind a FID, or None when unknown."""
        ...


class ImageRenderer(Protocol):
    """Port interface for frame image rendering."""

    def render(self, title: str, subtitle: str) -> str:
        """Return an image reference for the given title/subtitle pair."""
        ...


class MetadataRepository(Protocol):
    """Port interface for NFT metadata persistence."""

    def save_pending(self, domain: str, owner: str, metadata: dict[str, Any]) -> bool:
        """
        Store metadata for a domain that has not been minted yet.

        Args:
            domain: Full domain name (label + suffix)
            owner: Wallet address of the intended owner
            metadata: NFT metadata document

        Returns:
            True if stored, False if the domain is already minted
        """
        ...

    def mark_minted(self, domain: str, transaction_hash: str, metadata: dict[str, Any]) -> None:
        """Record a confirmed mint for the domain."""
        ...

    def get_metadata(self, domain: str) -> dict[str, Any] | None:
        """Return the stored metadata document, or None."""
        ...
