"""Expiry arithmetic shared by the token cache and the provider.

The registry refresh token and the identity token it was derived from expire
independently. A credential is only as good as the shorter-lived of the two,
so the advisory expiry handed to callers is the earlier of both.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional


# ACR refresh tokens are valid for three hours from issuance
DEFAULT_REGISTRY_TOKEN_LIFETIME = timedelta(hours=3)

# Refresh the identity token this long before it actually expires
DEFAULT_REFRESH_MARGIN = timedelta(minutes=5)


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def earlier_expiry(
    identity_token_expiry: datetime,
    now: Optional[datetime] = None,
    registry_token_lifetime: timedelta = DEFAULT_REGISTRY_TOKEN_LIFETIME,
) -> datetime:
    """Return the earlier of the identity token expiry and the registry token expiry.

    Args:
        identity_token_expiry: When the identity-provider access token expires
        now: Evaluation time (defaults to current UTC time)
        registry_token_lifetime: Validity window of a freshly issued registry token

    Returns:
        ``identity_token_expiry`` if it falls inside the registry window,
        otherwise ``now + registry_token_lifetime``
    """
    now = now or utc_now()
    registry_expiry = now + registry_token_lifetime
    if identity_token_expiry < registry_expiry:
        return identity_token_expiry
    return registry_expiry


def is_stale(
    expires_on: datetime,
    now: datetime,
    margin: timedelta = DEFAULT_REFRESH_MARGIN,
) -> bool:
    """True when ``expires_on`` is at or before ``now + margin``."""
    return expires_on <= now + margin


__all__ = [
    "DEFAULT_REGISTRY_TOKEN_LIFETIME",
    "DEFAULT_REFRESH_MARGIN",
    "utc_now",
    "earlier_expiry",
    "is_stale",
]
