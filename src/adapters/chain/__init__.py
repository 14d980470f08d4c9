"""Chain adapters - JSON-RPC wallet and fee data implementations."""

from .rpc import RpcWalletProvider, Web3FeeOracle

__all__ = ["RpcWalletProvider", "Web3FeeOracle"]
