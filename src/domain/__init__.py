"""
Domain layer - Pure business logic with zero framework imports.

This package contains the frame state machine, the minting pipeline and
the registration orchestrator. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    ChainRejection,
    ConfigurationError,
    DomainAlreadyRegistered,
    NetworkError,
    ProtocolDecodeError,
    RegistrationError,
    RegistrationInvalid,
    WalletProviderError,
)
from .frame import FrameEvent, FramePage, FrameState, FrameStateCodec, FrameStateMachine
from .minting import (
    ChainConfig,
    GasEstimate,
    MintingParams,
    MintingPipeline,
    TransactionOutcome,
    ValidationResult,
)
from .ports import (
    FeeOracle,
    IdentityResolver,
    ImageRenderer,
    MetadataRepository,
    RegistrationStatus,
    WalletProvider,
)
from .registration import RegistrationOrchestrator

__all__ = [
    "ChainConfig",
    "ChainRejection",
    "ConfigurationError",
    "DomainAlreadyRegistered",
    "FeeOracle",
    "FrameEvent",
    "FramePage",
    "FrameState",
    "FrameStateCodec",
    "FrameStateMachine",
    "GasEstimate",
    "IdentityResolver",
    "ImageRenderer",
    "MetadataRepository",
    "MintingParams",
    "MintingPipeline",
    "NetworkError",
    "ProtocolDecodeError",
    "RegistrationError",
    "RegistrationInvalid",
    "RegistrationOrchestrator",
    "RegistrationStatus",
    "TransactionOutcome",
    "ValidationResult",
    "WalletProvider",
    "WalletProviderError",
]
