"""Tests for the ACR authentication client."""

from unittest.mock import MagicMock

import pytest
import requests

from wi_registry_auth import (
    ACRAuthClient,
    AuthClient,
    AuthClientOptions,
    ClientConstructionError,
    ConfigInvalidError,
    MalformedExchangeResponseError,
    RegistryExchangeError,
    new_acr_auth_client,
)

SERVER = "https://myregistry.azurecr.io"


class _FakeResponse:
    def __init__(self, payload=None, status_code=200, body_error=None):
        self._payload = payload
        self.status_code = status_code
        self._body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self._body_error:
            raise self._body_error
        return self._payload


def make_client(response=None, error=None, options=None):
    session = MagicMock()
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return ACRAuthClient(SERVER, options, session=session), session


def test_exchange_posts_form():
    client, session = make_client(_FakeResponse({"refresh_token": "rt"}))

    resp = client.exchange_aad_access_token_for_acr_refresh_token(
        "access_token", "myregistry.azurecr.io", "aad-token", tenant="tenant-1", timeout=5
    )

    assert resp.refresh_token == "rt"
    url = session.post.call_args.args[0]
    kwargs = session.post.call_args.kwargs
    assert url == "https://myregistry.azurecr.io/oauth2/exchange"
    assert kwargs["data"] == {
        "grant_type": "access_token",
        "service": "myregistry.azurecr.io",
        "access_token": "aad-token",
        "tenant": "tenant-1",
    }
    assert kwargs["timeout"] == 5


def test_tenant_omitted_when_absent():
    client, session = make_client(_FakeResponse({"refresh_token": "rt"}))
    client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r.io", "tok")
    assert "tenant" not in session.post.call_args.kwargs["data"]


def test_default_timeout_from_options():
    client, session = make_client(
        _FakeResponse({"refresh_token": "rt"}), options=AuthClientOptions(timeout=30.0)
    )
    client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r.io", "tok")
    assert session.post.call_args.kwargs["timeout"] == 30.0


def test_missing_refresh_token_is_none():
    client, _ = make_client(_FakeResponse({"access_token": "x"}))
    resp = client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r.io", "tok")
    assert resp.refresh_token is None


def test_empty_refresh_token_preserved():
    client, _ = make_client(_FakeResponse({"refresh_token": ""}))
    resp = client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r", "t")
    assert resp.refresh_token == ""


def test_context_manager_closes_session():
    client, session = make_client(_FakeResponse({"refresh_token": "rt"}))
    with client:
        client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r", "t")
        session.close.assert_not_called()
    session.close.assert_called_once()


def test_http_error_maps_to_exchange_error():
    client, _ = make_client(_FakeResponse({}, status_code=401))
    with pytest.raises(RegistryExchangeError, match="401"):
        client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r.io", "tok")


def test_transport_error_maps_to_exchange_error():
    client, _ = make_client(error=requests.ConnectionError("connection refused"))
    with pytest.raises(RegistryExchangeError, match="connection refused"):
        client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r.io", "tok")


def test_non_json_body():
    client, _ = make_client(_FakeResponse(body_error=ValueError("Expecting value")))
    with pytest.raises(MalformedExchangeResponseError):
        client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r.io", "tok")


def test_non_object_body():
    client, _ = make_client(_FakeResponse(["refresh_token"]))
    with pytest.raises(MalformedExchangeResponseError):
        client.exchange_aad_access_token_for_acr_refresh_token("access_token", "r.io", "tok")


class TestFactory:
    """new_acr_auth_client validation."""

    def test_builds_client(self):
        client = new_acr_auth_client(SERVER + "/")
        assert isinstance(client, ACRAuthClient)
        assert isinstance(client, AuthClient)
        assert client.exchange_url == "https://myregistry.azurecr.io/oauth2/exchange"
        client.close()

    @pytest.mark.parametrize("url", ["http://myregistry.azurecr.io", "myregistry.azurecr.io", "https://"])
    def test_rejects_invalid_url(self, url):
        with pytest.raises(ClientConstructionError):
            new_acr_auth_client(url)


def test_options_reject_non_positive_timeout():
    with pytest.raises(ConfigInvalidError):
        AuthClientOptions(timeout=0)
