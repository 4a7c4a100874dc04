"""Tests for port protocols."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from wi_registry_auth import (
    AuthClient,
    AuthClientFactory,
    AuthClientOptions,
    AuthProvider,
    Clock,
    ExchangeResponse,
    HostResolver,
    IdentityToken,
    IdentityTokenFetcher,
    MetricsReporter,
    WorkloadIdentityAuthProvider,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_plain_implementations_drive_provider():
    """Hand-written adapters satisfy every port."""

    class StaticResolver:
        def __call__(self, reference: str) -> str:
            return reference.split("/", 1)[0]

    class InMemoryAuthClient:
        def __init__(self):
            self.exchanges = []

        def exchange_aad_access_token_for_acr_refresh_token(
            self,
            grant_type: str,
            service: str,
            access_token: str,
            tenant: Optional[str] = None,
            timeout: Optional[float] = None,
        ) -> ExchangeResponse:
            self.exchanges.append((grant_type, service, access_token, tenant))
            return ExchangeResponse(refresh_token=f"rt-for-{service}")

    auth_client = InMemoryAuthClient()

    class Factory:
        def __call__(self, server_url: str, options: Optional[AuthClientOptions] = None) -> AuthClient:
            return auth_client

    class Fetcher:
        def __call__(self, tenant_id, client_id, resource, timeout=None) -> IdentityToken:
            return IdentityToken(access_token=f"{tenant_id}/{client_id}", expires_on=NOW + timedelta(hours=1))

    recorded = []

    class Recorder:
        def __call__(self, elapsed_ns: int, host: str) -> None:
            recorded.append(host)

    resolver: HostResolver = StaticResolver()
    factory: AuthClientFactory = Factory()
    fetcher: IdentityTokenFetcher = Fetcher()
    reporter: MetricsReporter = Recorder()
    clock: Clock = lambda: NOW

    provider: AuthProvider = WorkloadIdentityAuthProvider(
        "tenant",
        "client",
        fetcher,
        resolve_host=resolver,
        auth_client_factory=factory,
        report_metrics=reporter,
        clock=clock,
    )

    assert not provider.enabled()
    cred = provider.provide("myregistry.azurecr.io/app:v1")

    assert provider.enabled()
    assert cred.password == "rt-for-myregistry.azurecr.io"
    assert auth_client.exchanges == [
        ("access_token", "myregistry.azurecr.io", "tenant/client", "tenant")
    ]
    assert isinstance(auth_client, AuthClient)
    assert recorded == ["myregistry.azurecr.io"]


def test_credential_advisory_expiry():
    """Credential.is_expired compares against the reconciled expiry."""
    from wi_registry_auth import Credential

    cred = Credential(username="u", password="s3cr3t", expires_on=NOW)
    assert cred.is_expired(NOW)
    assert not cred.is_expired(NOW - timedelta(seconds=1))
    assert not Credential(username="u", password="p").is_expired()
    assert "s3cr3t" not in repr(cred)
