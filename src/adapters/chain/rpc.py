"""
JSON-RPC chain adapters - Implement WalletProvider and FeeOracle protocols.

Both adapters talk to an EVM node through web3's async HTTP provider.
RpcWalletProvider forwards EIP-1193 requests verbatim, so it can sign
only for accounts the node itself manages (dev nodes, custodial signers).
Browser wallets implement the same protocol on the client side.

The API process builds only Web3FeeOracle. RpcWalletProvider is for signing
hosts that drive RegistrationOrchestrator.register() directly.
"""

import asyncio
import logging
from typing import Any

import aiohttp
from web3 import AsyncWeb3
from web3.exceptions import Web3Exception

from src.domain.exceptions import NetworkError, WalletProviderError

logger = logging.getLogger(__name__)

# Errors raised by the HTTP transport when the node is unreachable or answers
# with a non-2xx status
_TRANSPORT_ERRORS = (Web3Exception, aiohttp.ClientError, OSError, asyncio.TimeoutError)


def _connect(rpc_url: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))


class RpcWalletProvider:
    """
    Implements WalletProvider protocol via a JSON-RPC node.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, rpc_url: str) -> None:
        self._rpc_url = rpc_url
        self._w3 = _connect(rpc_url)

    @property
    def available(self) -> bool:
        return bool(self._rpc_url)

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Send one JSON-RPC request and return its result.

        Raises:
            WalletProviderError: On transport failure or a JSON-RPC error object
        """
        try:
            response = await self._w3.provider.make_request(method, params or [])
        except _TRANSPORT_ERRORS as e:
            raise WalletProviderError(f"RPC request {method} failed: {e}") from e

        if not isinstance(response, dict):
            raise WalletProviderError(f"Malformed RPC response to {method}")
        if "error" in response:
            error = response["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise WalletProviderError(f"RPC error: {message}")
        return response.get("result")

    async def close(self) -> None:
        await self._w3.provider.disconnect()


class Web3FeeOracle:
    """Implements FeeOracle protocol via eth_gasPrice."""

    def __init__(self, rpc_url: str) -> None:
        self._w3 = _connect(rpc_url)

    async def get_gas_price(self) -> int | None:
        """
        Fetch the node's current gas price in wei.

        Raises:
            NetworkError: If the node cannot be reached
        """
        try:
            return await self._w3.eth.gas_price
        except _TRANSPORT_ERRORS as e:
            raise NetworkError(f"Fee data query failed: {e}") from e

    async def close(self) -> None:
        await self._w3.provider.disconnect()
