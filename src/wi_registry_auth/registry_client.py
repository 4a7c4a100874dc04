"""Azure Container Registry authentication client.

Talks to the registry's OAuth2 exchange endpoint, which trades an AAD
access token for an ACR refresh token:

    POST https://{registry}/oauth2/exchange
    grant_type=access_token&service={registry}&access_token={aad token}[&tenant={tenant}]

The endpoint itself is implemented by the registry; this module only calls it.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

import requests
from requests.exceptions import RequestException

from .errors import ClientConstructionError, MalformedExchangeResponseError, RegistryExchangeError
from .types import AuthClientOptions, ExchangeResponse

logger = logging.getLogger(__name__)

EXCHANGE_PATH = "/oauth2/exchange"


class ACRAuthClient:
    """Thin requests wrapper around the ACR token exchange endpoint."""

    def __init__(
        self,
        server_url: str,
        options: Optional[AuthClientOptions] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.options = options or AuthClientOptions()
        self._session = session or requests.Session()

    @property
    def exchange_url(self) -> str:
        return f"{self.server_url}{EXCHANGE_PATH}"

    def exchange_aad_access_token_for_acr_refresh_token(
        self,
        grant_type: str,
        service: str,
        access_token: str,
        tenant: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ExchangeResponse:
        """Exchange an AAD access token for an ACR refresh token.

        Raises:
            RegistryExchangeError: On transport failure or a non-2xx status
            MalformedExchangeResponseError: If the body is not a JSON object
        """
        form = {
            "grant_type": grant_type,
            "service": service,
            "access_token": access_token,
        }
        if tenant:
            form["tenant"] = tenant

        effective_timeout = timeout if timeout is not None else self.options.timeout
        try:
            resp = self._session.post(
                self.exchange_url,
                data=form,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.options.user_agent,
                },
                timeout=effective_timeout,
            )
            resp.raise_for_status()
        except RequestException as exc:
            raise RegistryExchangeError(
                f"token exchange with {service} failed: {exc}"
            ) from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            raise MalformedExchangeResponseError(
                f"token exchange with {service} returned a non-JSON body"
            ) from exc
        if not isinstance(payload, dict):
            raise MalformedExchangeResponseError(
                f"token exchange with {service} returned unexpected payload type {type(payload).__name__}"
            )

        logger.debug("exchanged identity token for registry refresh token at %s", service)
        return ExchangeResponse(refresh_token=payload.get("refresh_token"))

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ACRAuthClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def new_acr_auth_client(server_url: str, options: Optional[AuthClientOptions] = None) -> ACRAuthClient:
    """Default AuthClientFactory.

    Raises:
        ClientConstructionError: If ``server_url`` is not an https URL with a host
    """
    parts = urlsplit(server_url)
    if parts.scheme != "https" or not parts.netloc:
        raise ClientConstructionError(f"invalid registry server URL: {server_url!r}")
    return ACRAuthClient(server_url, options)


__all__ = [
    "EXCHANGE_PATH",
    "ACRAuthClient",
    "new_acr_auth_client",
]
