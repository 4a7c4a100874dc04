"""Registry credentials from Azure workload identity."""

from .version import VERSION
from .errors import (
    ErrorKind,
    AuthProviderError,
    ConfigInvalidError,
    ConfigDeniedError,
    HostResolutionError,
    IdentityTokenRefreshError,
    ClientConstructionError,
    RegistryExchangeError,
    MalformedExchangeResponseError,
)
from .auth import (
    ACR_TOKEN_USERNAME,
    IdentityToken,
    Credential,
    AuthProvider,
)
from .expiry import (
    DEFAULT_REGISTRY_TOKEN_LIFETIME,
    DEFAULT_REFRESH_MARGIN,
    earlier_expiry,
    is_stale,
)
from .types import (
    ACCESS_TOKEN_GRANT_TYPE,
    AuthClientOptions,
    ExchangeRequest,
    ExchangeResponse,
)
from .ports import (
    Clock,
    HostResolver,
    IdentityTokenFetcher,
    AuthClient,
    AuthClientFactory,
    MetricsReporter,
)
from .reference import InvalidReferenceError, Reference, parse_reference, registry_host
from .token_cache import IdentityTokenCache
from .registry_client import ACRAuthClient, new_acr_auth_client
from .identity import ACR_RESOURCE, WorkloadIdentityTokenFetcher
from .metrics import ExchangeMetrics
from .provider import PROVIDER_NAME, WorkloadIdentityAuthProvider
from .config import (
    AZURE_TENANT_ID,
    AZURE_CLIENT_ID,
    AZURE_FEDERATED_TOKEN_FILE,
    AZURE_AUTHORITY_HOST,
    AzureWorkloadIdentityConfig,
    register_provider_factory,
    registered_providers,
    create_provider_from_config,
    create_azure_workload_identity_provider,
    AzureWorkloadIdentityProviderFactory,
    provider_config_from_yaml_string,
    load_provider_config,
)

__version__ = VERSION

__all__ = [
    # Version
    "VERSION",
    # Errors
    "ErrorKind",
    "AuthProviderError",
    "ConfigInvalidError",
    "ConfigDeniedError",
    "HostResolutionError",
    "IdentityTokenRefreshError",
    "ClientConstructionError",
    "RegistryExchangeError",
    "MalformedExchangeResponseError",
    # Credentials and the provider protocol
    "ACR_TOKEN_USERNAME",
    "IdentityToken",
    "Credential",
    "AuthProvider",
    # Expiry arithmetic
    "DEFAULT_REGISTRY_TOKEN_LIFETIME",
    "DEFAULT_REFRESH_MARGIN",
    "earlier_expiry",
    "is_stale",
    # Exchange types
    "ACCESS_TOKEN_GRANT_TYPE",
    "AuthClientOptions",
    "ExchangeRequest",
    "ExchangeResponse",
    # Ports
    "Clock",
    "HostResolver",
    "IdentityTokenFetcher",
    "AuthClient",
    "AuthClientFactory",
    "MetricsReporter",
    # Adapters
    "InvalidReferenceError",
    "Reference",
    "parse_reference",
    "registry_host",
    "IdentityTokenCache",
    "ACRAuthClient",
    "new_acr_auth_client",
    "ACR_RESOURCE",
    "WorkloadIdentityTokenFetcher",
    "ExchangeMetrics",
    # Provider
    "PROVIDER_NAME",
    "WorkloadIdentityAuthProvider",
    # Configuration
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_FEDERATED_TOKEN_FILE",
    "AZURE_AUTHORITY_HOST",
    "AzureWorkloadIdentityConfig",
    "register_provider_factory",
    "registered_providers",
    "create_provider_from_config",
    "create_azure_workload_identity_provider",
    "AzureWorkloadIdentityProviderFactory",
    "provider_config_from_yaml_string",
    "load_provider_config",
]
