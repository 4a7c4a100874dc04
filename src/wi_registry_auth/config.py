"""Provider construction from declarative configuration.

Auth provider configuration is a small mapping selecting the provider kind by
``name``, for example (YAML):

    name: azureWorkloadIdentity
    clientID: 1c7ac023-5bf6-4916-83f2-96dd203e35a2

Everything else the Azure workload identity provider needs comes from the
environment injected by the workload identity webhook:

    AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_FEDERATED_TOKEN_FILE, AZURE_AUTHORITY_HOST

Validation happens here, before any network call, so a misconfigured
workload fails at construction rather than at first pull.
"""

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigDeniedError, ConfigInvalidError
from .identity import WorkloadIdentityTokenFetcher
from .metrics import ExchangeMetrics
from .provider import PROVIDER_NAME, WorkloadIdentityAuthProvider

logger = logging.getLogger(__name__)

# Environment variables set by the Azure workload identity webhook
AZURE_TENANT_ID = "AZURE_TENANT_ID"
AZURE_CLIENT_ID = "AZURE_CLIENT_ID"
AZURE_FEDERATED_TOKEN_FILE = "AZURE_FEDERATED_TOKEN_FILE"
AZURE_AUTHORITY_HOST = "AZURE_AUTHORITY_HOST"

NAME_KEY = "name"

# factory(config, environ, **collaborator_overrides) -> provider
ProviderFactory = Callable[..., Any]

_PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {}


class AzureWorkloadIdentityConfig(BaseModel):
    """Declarative configuration of the Azure workload identity provider."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = PROVIDER_NAME
    client_id: Optional[str] = Field(default=None, alias="clientID")

    @field_validator('name')
    def validate_name(cls, v):
        if v != PROVIDER_NAME:
            raise ValueError(f"provider name must be {PROVIDER_NAME!r}, got {v!r}")
        return v


def register_provider_factory(name: str, factory: ProviderFactory) -> None:
    """Register a provider factory under the config ``name`` discriminator.

    Raises:
        ValueError: If a factory is already registered under ``name``
    """
    if not name:
        raise ValueError("provider name must be non-empty")
    if name in _PROVIDER_FACTORIES:
        raise ValueError(f"auth provider {name!r} is already registered")
    _PROVIDER_FACTORIES[name] = factory


def registered_providers() -> List[str]:
    """Sorted names of all registered provider kinds."""
    return sorted(_PROVIDER_FACTORIES)


def create_provider_from_config(
    config: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
):
    """Build the provider selected by ``config["name"]``.

    Args:
        config: Provider configuration mapping
        environ: Environment to read (defaults to os.environ)
        **overrides: Collaborators forwarded to the provider factory

    Returns:
        A constructed provider

    Raises:
        ConfigInvalidError: If the config is not a mapping or names no known provider
        ConfigDeniedError: If the selected provider rejects the environment
    """
    if not isinstance(config, Mapping):
        raise ConfigInvalidError(
            f"auth provider config must be a mapping, got {type(config).__name__}"
        )
    name = config.get(NAME_KEY)
    if not isinstance(name, str) or not name:
        raise ConfigInvalidError(
            f"failed to find auth provider name in the auth providers config with key {NAME_KEY!r}"
        )
    factory = _PROVIDER_FACTORIES.get(name)
    if factory is None:
        raise ConfigInvalidError(
            f"auth provider of type {name!r} is not supported, "
            f"registered providers: {', '.join(registered_providers())}"
        )
    return factory(config, environ, **overrides)


def create_azure_workload_identity_provider(
    config: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> WorkloadIdentityAuthProvider:
    """Validate config and environment, then build a WorkloadIdentityAuthProvider.

    Checks run in order and stop at the first failure: tenant ID, client ID
    (config first, then environment), then the federated token file and
    authority host.

    Args:
        config: Mapping with ``name`` and optional ``clientID``
        environ: Environment to read (defaults to os.environ)
        **overrides: Keyword arguments forwarded to WorkloadIdentityAuthProvider,
            e.g. ``get_identity_token`` or ``auth_client_factory``

    Raises:
        ConfigInvalidError: If the config does not parse
        ConfigDeniedError: If a required setting is missing
    """
    try:
        conf = AzureWorkloadIdentityConfig.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigInvalidError(f"invalid {PROVIDER_NAME} auth provider config: {e}") from e

    env = os.environ if environ is None else environ

    tenant_id = env.get(AZURE_TENANT_ID, "")
    if not tenant_id:
        raise ConfigDeniedError("azure tenant id environment variable is empty")

    client_id = conf.client_id or env.get(AZURE_CLIENT_ID, "")
    if not client_id:
        raise ConfigDeniedError(
            f"no client ID provided and {AZURE_CLIENT_ID} environment variable is empty"
        )

    token_file = env.get(AZURE_FEDERATED_TOKEN_FILE, "")
    authority_host = env.get(AZURE_AUTHORITY_HOST, "")
    if not token_file or not authority_host:
        raise ConfigDeniedError(
            f"required environment variables not set, "
            f"{AZURE_FEDERATED_TOKEN_FILE}: {token_file}, {AZURE_AUTHORITY_HOST}: {authority_host}"
        )

    fetcher = overrides.pop("get_identity_token", None) or WorkloadIdentityTokenFetcher(
        token_file, authority_host
    )
    overrides.setdefault("report_metrics", ExchangeMetrics())

    logger.debug("created %s auth provider for client %s", PROVIDER_NAME, client_id)
    return WorkloadIdentityAuthProvider(tenant_id, client_id, fetcher, **overrides)


class AzureWorkloadIdentityProviderFactory:
    """Provider factory for the ``azureWorkloadIdentity`` config name.

    Collaborator overrides given here apply to every provider it creates.
    """

    name = PROVIDER_NAME

    def __init__(self, **overrides: Any) -> None:
        self._overrides = overrides

    def create(
        self,
        config: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> WorkloadIdentityAuthProvider:
        return create_azure_workload_identity_provider(
            config, environ, **{**self._overrides, **overrides}
        )

    __call__ = create


def provider_config_from_yaml_string(yaml_str: str) -> Dict[str, Any]:
    """Parse a provider config mapping from a YAML string."""
    data = yaml.safe_load(yaml_str)
    if not isinstance(data, dict):
        raise ConfigInvalidError("auth provider config must be a YAML mapping")
    return data


def load_provider_config(path: Path) -> Dict[str, Any]:
    """Load a provider config mapping from a YAML file."""
    with open(path) as f:
        return provider_config_from_yaml_string(f.read())


register_provider_factory(PROVIDER_NAME, AzureWorkloadIdentityProviderFactory())


__all__ = [
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_FEDERATED_TOKEN_FILE",
    "AZURE_AUTHORITY_HOST",
    "AzureWorkloadIdentityConfig",
    "ProviderFactory",
    "register_provider_factory",
    "registered_providers",
    "create_provider_from_config",
    "create_azure_workload_identity_provider",
    "AzureWorkloadIdentityProviderFactory",
    "provider_config_from_yaml_string",
    "load_provider_config",
]
