"""
Ambient credential provider abstraction.

An ambient provider delegates to a vendor SDK's default credential chain
(environment, config files, instance metadata, SSO, workload identity) and
wraps the result in cloudctx credential types.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

from cloudctx.core.config import SdkCapabilities, Settings, get_settings
from cloudctx.core.credentials import Credentials, CredentialsSupplier
from cloudctx.core.errors import ConfigurationError
from cloudctx.core.logger import get_credentials_logger


class AmbientCredentialsProvider(ABC):
    """
    Abstract base class for ambient credential providers.

    The SDK client (a boto3 session, an azure-identity credential) is created
    once per provider instance, under a lock, and reused. The credentials it
    yields are not: every resolve() call goes back to the SDK so that rotating
    instance-role keys and hour-long Entra tokens stay valid for as long as a
    pool holds the supplier. The SDK does its own caching and refresh.
    """

    vendor: str = ""
    required_distributions: Tuple[str, ...] = ()
    ambient_examples: str = ""
    example_provider: str = ""
    example_identity: str = ""
    example_credential: str = ""

    def __init__(self, available: bool, debug: bool = False, logger=None):
        """
        Args:
            available: Whether the vendor SDK is installed, see detect_sdk_capabilities()
            debug: Write credential diagnostics to the console logger
            logger: Explicit logger, overrides debug
        """
        self._available = available
        self.logger = logger or get_credentials_logger(debug)
        self._client: Any = None
        self._client_lock = threading.Lock()

    def is_available(self) -> bool:
        return self._available

    def resolve(self, scope: Optional[str] = None) -> Credentials:
        """
        Resolve fresh credentials from the vendor default chain.

        Args:
            scope: Access scope or audience for vendors that issue scoped tokens

        Raises:
            ConfigurationError: If the vendor SDK is not installed
            ResolutionFailure: If the SDK could not produce credentials
        """
        if not self._available:
            raise self.missing_sdk_error()
        return self._resolve_credentials(self._get_client(), scope)

    def credentials_supplier(self, scope: Optional[str] = None) -> Optional[CredentialsSupplier]:
        """
        Return a supplier that resolves on every call, or None when the SDK is
        missing so callers can fall back to another credential source.
        """
        if not self._available:
            return None

        def supplier() -> Credentials:
            return self.resolve(scope)

        return supplier

    def _get_client(self) -> Any:
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = self._create_client()
        return self._client

    def missing_sdk_error(self) -> ConfigurationError:
        packages = "\n".join(f"  - {name}" for name in self.required_distributions)
        return ConfigurationError(
            f"{self.vendor} SDK is not installed. To use ambient credentials ({self.ambient_examples}), "
            f"install the following packages:\n"
            f"{packages}\n\n"
            f"Alternatively, provide explicit credentials using the .credentials() method:\n"
            f"  ContextBuilder.new_builder(\"{self.example_provider}\")\n"
            f"    .credentials(\"{self.example_identity}\", \"{self.example_credential}\")\n"
            f"    .build_credentials_supplier()"
        )

    @abstractmethod
    def default_parameter(self) -> str:
        """Vendor default parameter: the region for AWS, the management scope for Azure."""
        pass

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the SDK object that owns the default credential chain."""
        pass

    @abstractmethod
    def _resolve_credentials(self, client: Any, scope: Optional[str]) -> Credentials:
        """Ask the SDK for credentials and wrap them."""
        pass


def get_ambient_provider(
    vendor: str,
    capabilities: SdkCapabilities,
    debug: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> AmbientCredentialsProvider:
    """
    Factory function to create the ambient provider for a vendor.

    Args:
        vendor: 'aws' or 'azure'
        capabilities: Installed vendor SDKs
        debug: Debug toggle; defaults to the vendor's setting
        settings: Settings to read toggles and defaults from; defaults to get_settings()

    Raises:
        ConfigurationError: If the vendor is not supported
    """
    from .aws_provider import AWSCredentialsProvider
    from .azure_provider import AzureCredentialsProvider

    settings = settings or get_settings()
    provider_map = {
        'aws': lambda: AWSCredentialsProvider(
            available=capabilities.aws,
            debug=settings.aws_credentials_debug if debug is None else debug,
            default_region=settings.default_aws_region,
        ),
        'azure': lambda: AzureCredentialsProvider(
            available=capabilities.azure,
            debug=settings.azure_credentials_debug if debug is None else debug,
        ),
    }

    factory = provider_map.get(vendor)
    if not factory:
        raise ConfigurationError(
            f"Unsupported ambient credentials vendor: {vendor}. "
            f"Supported vendors: {list(provider_map.keys())}"
        )
    return factory()
