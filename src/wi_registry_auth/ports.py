"""Port definitions for the credential provider.

These protocols define the boundaries between the credential-acquisition
core and the systems it drives: reference parsing, the identity provider,
the registry's token endpoint and metrics. Production adapters live in
``reference``, ``identity``, ``registry_client`` and ``metrics``; tests
substitute plain callables or mocks.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .auth import IdentityToken
from .types import AuthClientOptions, ExchangeResponse


class Clock(Protocol):
    """Source of the current, timezone-aware time."""

    def __call__(self) -> datetime:
        ...


class HostResolver(Protocol):
    """Extracts the registry host from an artifact reference."""

    def __call__(self, reference: str) -> str:
        """Resolve a reference to its registry host.

        Args:
            reference: Artifact reference like "myacr.azurecr.io/app:v1"

        Returns:
            Registry host, e.g. "myacr.azurecr.io"

        Raises:
            Any exception if the reference is malformed
        """
        ...


class IdentityTokenFetcher(Protocol):
    """Obtains an identity-provider access token for the workload."""

    def __call__(
        self,
        tenant_id: str,
        client_id: str,
        resource: str,
        timeout: Optional[float] = None,
    ) -> IdentityToken:
        """Acquire a fresh access token.

        Args:
            tenant_id: Directory (tenant) the workload identity lives in
            client_id: Application (client) ID of the workload identity
            resource: Scope the token is requested for
            timeout: Optional request timeout in seconds

        Returns:
            IdentityToken with access token and expiry
        """
        ...


@runtime_checkable
class AuthClient(Protocol):
    """Registry authentication client."""

    def exchange_aad_access_token_for_acr_refresh_token(
        self,
        grant_type: str,
        service: str,
        access_token: str,
        tenant: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ExchangeResponse:
        """Exchange an identity access token for a registry refresh token.

        Args:
            grant_type: Always "access_token" for this flow
            service: Registry host the token is scoped to
            access_token: Identity-provider access token
            tenant: Optional tenant ID
            timeout: Optional request timeout in seconds

        Returns:
            ExchangeResponse carrying the refresh token, if any
        """
        ...


class AuthClientFactory(Protocol):
    """Builds an AuthClient for a registry endpoint."""

    def __call__(self, server_url: str, options: Optional[AuthClientOptions] = None) -> AuthClient:
        ...


class MetricsReporter(Protocol):
    """Receives the duration of each registry exchange."""

    def __call__(self, elapsed_ns: int, host: str) -> None:
        ...


__all__ = [
    "Clock",
    "HostResolver",
    "IdentityTokenFetcher",
    "AuthClient",
    "AuthClientFactory",
    "MetricsReporter",
]
