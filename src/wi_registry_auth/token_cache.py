"""In-memory cache for the identity-provider access token."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Optional

from .auth import IdentityToken
from .errors import IdentityTokenRefreshError
from .expiry import DEFAULT_REFRESH_MARGIN, is_stale, utc_now
from .ports import Clock, IdentityTokenFetcher

logger = logging.getLogger(__name__)


class IdentityTokenCache:
    """Holds the last identity token obtained for one tenant/client pair.

    The cached token is only ever replaced by a successful fetch. A failed
    fetch leaves the previous (stale) token in place and raises
    IdentityTokenRefreshError. Check-and-refresh runs under a lock, so
    concurrent callers on a stale cache trigger a single fetch.
    """

    def __init__(
        self,
        fetcher: IdentityTokenFetcher,
        resource: str,
        token: Optional[IdentityToken] = None,
        clock: Clock = utc_now,
        refresh_margin: timedelta = DEFAULT_REFRESH_MARGIN,
    ) -> None:
        if refresh_margin < timedelta(0):
            raise ValueError(f"refresh_margin must be non-negative, got {refresh_margin}")
        self._fetcher = fetcher
        self._resource = resource
        self._token = token or IdentityToken.empty()
        self._clock = clock
        self._refresh_margin = refresh_margin
        self._lock = threading.Lock()

    @property
    def token(self) -> IdentityToken:
        return self._token

    @property
    def fetcher(self) -> IdentityTokenFetcher:
        return self._fetcher

    def is_stale(self) -> bool:
        return is_stale(self._token.expires_on, self._clock(), self._refresh_margin)

    def get(self, tenant_id: str, client_id: str, timeout: Optional[float] = None) -> IdentityToken:
        """Return a fresh token, fetching a new one only if the cached one is stale.

        Raises:
            IdentityTokenRefreshError: If the fetch fails or returns no token
        """
        if not self.is_stale():
            return self._token

        with self._lock:
            # Another caller may have refreshed while we waited
            if not self.is_stale():
                return self._token

            logger.debug("refreshing identity token for tenant %s, client %s", tenant_id, client_id)
            try:
                token = self._fetcher(tenant_id, client_id, self._resource, timeout=timeout)
            except Exception as e:
                raise IdentityTokenRefreshError(
                    f"failed to refresh identity access token: {e}"
                ) from e

            if token is None or not token.access_token:
                raise IdentityTokenRefreshError("identity provider returned an empty access token")

            self._token = token
            logger.debug("identity token refreshed, expires on %s", token.expires_on.isoformat())
            return token


__all__ = ["IdentityTokenCache"]
