"""Azure workload identity credential provider.

Turns a workload's federated identity into ACR credentials in two hops:

    federated token --(AAD)--> AAD access token --(ACR /oauth2/exchange)--> ACR refresh token

Only the AAD access token is cached; every call to ``provide`` performs a
fresh registry exchange and returns a new Credential.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Optional

from .auth import ACR_TOKEN_USERNAME, Credential, IdentityToken
from .errors import (
    AuthProviderError,
    ClientConstructionError,
    HostResolutionError,
    MalformedExchangeResponseError,
    RegistryExchangeError,
)
from .expiry import DEFAULT_REFRESH_MARGIN, DEFAULT_REGISTRY_TOKEN_LIFETIME, earlier_expiry, utc_now
from .identity import ACR_RESOURCE
from .ports import AuthClientFactory, Clock, HostResolver, IdentityTokenFetcher, MetricsReporter
from .reference import registry_host
from .registry_client import new_acr_auth_client
from .token_cache import IdentityTokenCache
from .types import ACCESS_TOKEN_GRANT_TYPE, AuthClientOptions, ExchangeRequest

logger = logging.getLogger(__name__)

PROVIDER_NAME = "azureWorkloadIdentity"


def _discard_metrics(elapsed_ns: int, host: str) -> None:
    pass


class WorkloadIdentityAuthProvider:
    """AuthProvider for Azure Container Registry using workload identity.

    All network-facing collaborators are injected; see ``ports`` for their
    contracts. Use ``config.create_provider_from_config`` to build one from
    configuration and environment.

    Attributes:
        tenant_id: AAD tenant of the workload identity
        client_id: AAD application (client) ID of the workload identity
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        get_identity_token: IdentityTokenFetcher,
        *,
        resolve_host: HostResolver = registry_host,
        auth_client_factory: AuthClientFactory = new_acr_auth_client,
        report_metrics: MetricsReporter = _discard_metrics,
        clock: Clock = utc_now,
        identity_token: Optional[IdentityToken] = None,
        resource: str = ACR_RESOURCE,
        refresh_margin: timedelta = DEFAULT_REFRESH_MARGIN,
        registry_token_lifetime: timedelta = DEFAULT_REGISTRY_TOKEN_LIFETIME,
        client_options: Optional[AuthClientOptions] = None,
    ) -> None:
        self.tenant_id = tenant_id
        self.client_id = client_id
        self._resolve_host = resolve_host
        self._auth_client_factory = auth_client_factory
        self._report_metrics = report_metrics
        self._clock = clock
        self._registry_token_lifetime = registry_token_lifetime
        self._client_options = client_options
        self._token_cache = IdentityTokenCache(
            get_identity_token,
            resource,
            token=identity_token,
            clock=clock,
            refresh_margin=refresh_margin,
        )

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    @property
    def identity_token(self) -> IdentityToken:
        """Currently cached identity token (empty before the first refresh)."""
        return self._token_cache.token

    def enabled(self) -> bool:
        """True iff tenant, client and a cached access token are all present."""
        return bool(self.tenant_id and self.client_id and self._token_cache.token.access_token)

    def provide(self, artifact: str, timeout: Optional[float] = None) -> Credential:
        """Get an ACR credential for the registry hosting ``artifact``.

        Args:
            artifact: Artifact reference, e.g. "myregistry.azurecr.io/app:v1"
            timeout: Optional per-request timeout in seconds for the AAD and ACR calls

        Returns:
            Credential whose password is a fresh ACR refresh token

        Raises:
            HostResolutionError: The reference has no resolvable registry host
            IdentityTokenRefreshError: The cached AAD token was stale and refresh failed
            ClientConstructionError: The registry client could not be built
            RegistryExchangeError: The ACR exchange call failed
            MalformedExchangeResponseError: The exchange returned no refresh token
        """
        try:
            host = self._resolve_host(artifact)
        except Exception as e:
            raise HostResolutionError(
                f"failed to resolve registry host from {artifact!r}: {e}"
            ) from e

        identity_token = self._token_cache.get(self.tenant_id, self.client_id, timeout=timeout)
        request = ExchangeRequest(
            registry_host=host,
            identity_access_token=identity_token.access_token,
            tenant_id=self.tenant_id,
        )

        start = time.monotonic_ns()
        refresh_token = self._exchange(request, timeout)
        self._emit_metrics(time.monotonic_ns() - start, host)

        return Credential(
            username=ACR_TOKEN_USERNAME,
            password=refresh_token,
            expires_on=earlier_expiry(
                identity_token.expires_on,
                now=self._clock(),
                registry_token_lifetime=self._registry_token_lifetime,
            ),
            provider=PROVIDER_NAME,
        )

    def _exchange(self, request: ExchangeRequest, timeout: Optional[float]) -> str:
        server_url = f"https://{request.registry_host}"
        try:
            client = self._auth_client_factory(server_url, self._client_options)
        except Exception as e:
            raise ClientConstructionError(
                f"failed to create authentication client for {server_url}: {e}"
            ) from e

        try:
            response = client.exchange_aad_access_token_for_acr_refresh_token(
                ACCESS_TOKEN_GRANT_TYPE,
                request.registry_host,
                request.identity_access_token,
                tenant=request.tenant_id,
                timeout=timeout,
            )
        except AuthProviderError:
            raise
        except Exception as e:
            raise RegistryExchangeError(
                f"failed to get refresh token for container registry {request.registry_host} "
                f"by azure workload identity token: {e}"
            ) from e
        finally:
            close = getattr(client, "close", None)
            if callable(close):
                close()

        # An empty token is a valid registry answer; only an absent one is not
        if response.refresh_token is None:
            raise MalformedExchangeResponseError(
                f"registry {request.registry_host} returned no refresh token"
            )
        return response.refresh_token

    def close(self) -> None:
        """Release resources held by the identity token fetcher, if any."""
        close = getattr(self._token_cache.fetcher, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "WorkloadIdentityAuthProvider":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _emit_metrics(self, elapsed_ns: int, host: str) -> None:
        try:
            self._report_metrics(elapsed_ns, host)
        except Exception:
            logger.warning("failed to report exchange duration for %s", host, exc_info=True)

    def __repr__(self) -> str:
        return f"WorkloadIdentityAuthProvider(tenant_id={self.tenant_id!r}, client_id={self.client_id!r})"


__all__ = [
    "PROVIDER_NAME",
    "WorkloadIdentityAuthProvider",
]
