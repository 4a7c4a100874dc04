"""Auth provider exceptions."""

import enum


class ErrorKind(enum.Enum):
    """Failure categories surfaced by credential providers."""
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_DENIED = "CONFIG_DENIED"
    HOST_RESOLUTION_FAILED = "HOST_RESOLUTION_FAILED"
    IDENTITY_TOKEN_REFRESH_FAILED = "IDENTITY_TOKEN_REFRESH_FAILED"
    CLIENT_CONSTRUCTION_FAILED = "CLIENT_CONSTRUCTION_FAILED"
    REGISTRY_EXCHANGE_FAILED = "REGISTRY_EXCHANGE_FAILED"
    MALFORMED_EXCHANGE_RESPONSE = "MALFORMED_EXCHANGE_RESPONSE"


class AuthProviderError(Exception):
    """Base error for credential acquisition.

    Attributes:
        kind: Which step failed
        detail: Human-readable detail; callers may match on it literally
    """
    kind: ErrorKind = ErrorKind.CONFIG_INVALID

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}"


class ConfigInvalidError(AuthProviderError):
    """Raised when provider configuration is malformed or names no known provider."""
    kind = ErrorKind.CONFIG_INVALID


class ConfigDeniedError(AuthProviderError):
    """Raised when required identity settings are missing from config or environment."""
    kind = ErrorKind.CONFIG_DENIED


class HostResolutionError(AuthProviderError):
    kind = ErrorKind.HOST_RESOLUTION_FAILED


class IdentityTokenRefreshError(AuthProviderError):
    kind = ErrorKind.IDENTITY_TOKEN_REFRESH_FAILED


class ClientConstructionError(AuthProviderError):
    kind = ErrorKind.CLIENT_CONSTRUCTION_FAILED


class RegistryExchangeError(AuthProviderError):
    kind = ErrorKind.REGISTRY_EXCHANGE_FAILED


class MalformedExchangeResponseError(AuthProviderError):
    """Raised when the registry answers without a usable refresh token."""
    kind = ErrorKind.MALFORMED_EXCHANGE_RESPONSE


__all__ = [
    "ErrorKind",
    "AuthProviderError",
    "ConfigInvalidError",
    "ConfigDeniedError",
    "HostResolutionError",
    "IdentityTokenRefreshError",
    "ClientConstructionError",
    "RegistryExchangeError",
    "MalformedExchangeResponseError",
]
