"""
Domain exceptions - Semantic error types for domain registration.

This module defines domain-specific exceptions that communicate
business rule violations and infrastructure failures without leaking
adapter details into the domain layer.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class RegistrationInvalid(RegistrationError):
    """Registration parameters violate one or more validation rules."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class DomainAlreadyRegistered(RegistrationError):
    """Domain already has a minted registration record."""

    pass


class ConfigurationError(RegistrationError):
    """Required configuration (contract address, RPC endpoint) is missing."""

    pass


class NetworkError(RegistrationError):
    """RPC node or wallet provider could not be reached."""

    pass


class WalletProviderError(NetworkError):
    """Wallet provider is unavailable or rejected a request."""

    pass


class ChainRejection(RegistrationError):
    """Transaction was mined with a non-success status."""

    pass


class ProtocolDecodeError(RegistrationError):
    """Frame state token could not be decoded."""

    pass
