"""Credential types and the provider protocol.

This defines the contract between registry credential providers and the
verification client that consumes their output when pulling artifacts.
"""

from typing import Protocol, Optional, runtime_checkable
from dataclasses import dataclass
from datetime import datetime, timezone


# ACR accepts refresh tokens only when paired with this username
ACR_TOKEN_USERNAME = "00000000-0000-0000-0000-000000000000"

_EPOCH_MIN = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class IdentityToken:
    """Access token issued by the identity provider.

    Attributes:
        access_token: Bearer token, empty before the first refresh
        expires_on: Timezone-aware expiry of the token
    """
    access_token: str
    expires_on: datetime

    def __post_init__(self):
        if self.expires_on.tzinfo is None:
            # Naive timestamps are taken as UTC
            object.__setattr__(self, "expires_on", self.expires_on.replace(tzinfo=timezone.utc))

    @classmethod
    def empty(cls) -> "IdentityToken":
        """Token held by a provider that has never refreshed."""
        return cls(access_token="", expires_on=_EPOCH_MIN)


@dataclass(frozen=True)
class Credential:
    """Ready-to-use credential for registry operations.

    Attributes:
        username: Fixed sentinel for token auth (see ACR_TOKEN_USERNAME)
        password: Registry refresh token
        expires_on: Advisory expiry; never later than the identity token's
        provider: Name of the provider that issued the credential
    """
    username: str
    password: str
    expires_on: Optional[datetime] = None
    provider: str = ""

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check the advisory expiry against ``now`` (defaults to current UTC time)."""
        if self.expires_on is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_on

    def __repr__(self) -> str:
        return (
            f"Credential(username={self.username!r}, password='***', "
            f"expires_on={self.expires_on!r}, provider={self.provider!r})"
        )


@runtime_checkable
class AuthProvider(Protocol):
    """Protocol for obtaining registry credentials.

    Implementations handle cloud-specific authentication flows.
    """

    def enabled(self) -> bool:
        """Report whether the provider is configured and holds a token.

        Must not perform network calls.
        """
        ...

    def provide(self, artifact: str, timeout: Optional[float] = None) -> Credential:
        """Get a credential for the registry hosting ``artifact``.

        Args:
            artifact: Artifact reference (e.g., "myacr.azurecr.io/net-monitor:v1")
            timeout: Optional per-request timeout in seconds for outbound calls

        Returns:
            Credential ready for registry authentication
        """
        ...


__all__ = [
    "ACR_TOKEN_USERNAME",
    "IdentityToken",
    "Credential",
    "AuthProvider",
]
