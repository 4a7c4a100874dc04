"""Value types exchanged with the registry authentication client."""

from dataclasses import dataclass
from typing import Optional

from .errors import ConfigInvalidError


# Grant type selecting the AAD-access-token -> ACR-refresh-token exchange
ACCESS_TOKEN_GRANT_TYPE = "access_token"

DEFAULT_USER_AGENT = "wi-registry-auth"


@dataclass(frozen=True)
class AuthClientOptions:
    """Options handed to the registry client factory.

    Attributes:
        timeout: Default per-request timeout in seconds, None for no timeout
        user_agent: User-Agent header sent with exchange requests
    """
    timeout: Optional[float] = None
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigInvalidError(f"timeout must be positive, got {self.timeout}")


@dataclass(frozen=True)
class ExchangeRequest:
    """Inputs to one identity-token -> registry-token exchange."""
    registry_host: str
    identity_access_token: str
    tenant_id: Optional[str] = None


@dataclass(frozen=True)
class ExchangeResponse:
    """Registry answer to an exchange; refresh_token is None when the body lacked one."""
    refresh_token: Optional[str] = None


__all__ = [
    "ACCESS_TOKEN_GRANT_TYPE",
    "DEFAULT_USER_AGENT",
    "AuthClientOptions",
    "ExchangeRequest",
    "ExchangeResponse",
]
