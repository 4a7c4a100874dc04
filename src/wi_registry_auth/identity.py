"""Identity-provider access tokens from a federated workload identity.

The workload's projected service-account token (AZURE_FEDERATED_TOKEN_FILE)
is presented to Azure AD as a client assertion; AAD answers with an access
token scoped to the container registry resource. The token issuance protocol
itself is handled by azure-identity.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from azure.identity import WorkloadIdentityCredential

from .auth import IdentityToken

logger = logging.getLogger(__name__)

# Scope of tokens accepted by the ACR exchange endpoint
ACR_RESOURCE = "https://containerregistry.azure.net/.default"


class WorkloadIdentityTokenFetcher:
    """IdentityTokenFetcher backed by azure-identity's WorkloadIdentityCredential.

    One credential is kept per (tenant, client) pair so its MSAL token cache
    is reused across calls.
    """

    def __init__(self, token_file_path: str, authority_host: str) -> None:
        self.token_file_path = token_file_path
        self.authority_host = authority_host
        self._credentials: Dict[Tuple[str, str], WorkloadIdentityCredential] = {}

    def _credential(self, tenant_id: str, client_id: str) -> WorkloadIdentityCredential:
        key = (tenant_id, client_id)
        if key not in self._credentials:
            self._credentials[key] = WorkloadIdentityCredential(
                tenant_id=tenant_id,
                client_id=client_id,
                token_file_path=self.token_file_path,
                authority=self.authority_host,
            )
        return self._credentials[key]

    def __call__(
        self,
        tenant_id: str,
        client_id: str,
        resource: str = ACR_RESOURCE,
        timeout: Optional[float] = None,
    ) -> IdentityToken:
        kwargs = {}
        if timeout is not None:
            kwargs["connection_timeout"] = timeout
            kwargs["read_timeout"] = timeout

        access = self._credential(tenant_id, client_id).get_token(resource, **kwargs)
        expires_on = datetime.fromtimestamp(access.expires_on, tz=timezone.utc)
        logger.debug("obtained AAD access token for client %s, expires on %s", client_id, expires_on.isoformat())
        return IdentityToken(access_token=access.token, expires_on=expires_on)

    def close(self) -> None:
        for credential in self._credentials.values():
            credential.close()
        self._credentials.clear()


__all__ = [
    "ACR_RESOURCE",
    "WorkloadIdentityTokenFetcher",
]
