"""
Name registry contract call encoding.

The registry exposes a single payable entry point:

    register(string name, address owner, string bio, uint256 fid, string metadataURI)
"""

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

REGISTER_SIGNATURE = "register(string,address,string,uint256,string)"
REGISTER_ARG_TYPES = ["string", "address", "string", "uint256", "string"]

REGISTER_SELECTOR = function_signature_to_4byte_selector(REGISTER_SIGNATURE)


def encode_register_call(
    full_domain: str, owner: str, bio: str, fid: int, metadata_uri: str
) -> str:
    """Return 0x-prefixed calldata for the register() entry point."""
    args = encode(
        REGISTER_ARG_TYPES,
        [full_domain, to_checksum_address(owner), bio, fid, metadata_uri],
    )
    return "0x" + (REGISTER_SELECTOR + args).hex()
