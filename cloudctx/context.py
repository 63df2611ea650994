"""
Context builder.

    supplier = ContextBuilder.new_builder("aws").build_credentials_supplier()
    credentials = supplier()

    with ContextBuilder.new_builder("aws-rds") \\
            .endpoint("jdbc:postgresql://mydb.abc123.us-east-1.rds.amazonaws.com:5432/app") \\
            .credentials("app_user", "") \\
            .build_datasource_context() as context:
        with context.get_datasource().connection() as conn:
            conn.execute("SELECT 1")

Explicit static credentials come from the CLOUDCTX_IDENTITY/CLOUDCTX_CREDENTIAL
environment variables, the cloudctx.identity/cloudctx.credential override
properties and credentials(). They share one priority level: the environment
is applied first, then builder calls in the order they were made, and the
last value set for each field wins.
"""
from typing import Any, Dict, Mapping, Optional, Union

from cloudctx.core.config import SdkCapabilities, Settings, detect_sdk_capabilities, get_settings
from cloudctx.core.credentials import CredentialsSupplier
from cloudctx.core.errors import ConfigurationError
from cloudctx.core.logger import setup_logger
from cloudctx.core.resolver import CredentialPriorityResolver, CredentialSelection
from cloudctx.datasource.constants import PROPERTY_CREDENTIAL, PROPERTY_ENDPOINT, PROPERTY_IDENTITY
from cloudctx.datasource.context import DataSourceContext
from cloudctx.providers.registry import ProviderMetadata, get_provider_metadata

logger = setup_logger(__name__, include_location=True)

_STATIC_PROPERTIES = {
    PROPERTY_IDENTITY: "identity",
    PROPERTY_CREDENTIAL: "credential",
}


class ContextBuilder:

    def __init__(self, metadata: ProviderMetadata):
        self.metadata = metadata
        self._name: Optional[str] = None
        self._endpoint: Optional[str] = None
        self._overrides: Dict[str, str] = {}
        self._static: Dict[str, Optional[str]] = {}
        self._supplier: Optional[CredentialsSupplier] = None
        self._capabilities: Optional[SdkCapabilities] = None
        self._settings: Optional[Settings] = None

    @classmethod
    def new_builder(cls, provider: Union[str, ProviderMetadata]) -> "ContextBuilder":
        """
        Raises:
            ConfigurationError: If the provider id is not registered
        """
        if isinstance(provider, ProviderMetadata):
            return cls(provider)
        return cls(get_provider_metadata(provider))

    def credentials(self, identity: str, credential: Optional[str]) -> "ContextBuilder":
        """Explicit static credentials. An empty credential requests token authentication."""
        self._static["identity"] = identity
        self._static["credential"] = credential
        return self

    def credentials_supplier(self, supplier: CredentialsSupplier) -> "ContextBuilder":
        """Supplier called whenever credentials are needed; outranks every other source."""
        if not callable(supplier):
            raise ConfigurationError("credentials supplier must be callable")
        self._supplier = supplier
        return self

    def overrides(self, properties: Mapping[str, Any]) -> "ContextBuilder":
        """Override properties. Values are stored as strings; None removes an override."""
        for key, value in properties.items():
            if value is None:
                self._overrides.pop(key, None)
                self._static.pop(_STATIC_PROPERTIES.get(key), None)
                continue
            value = str(value)
            self._overrides[key] = value
            if key in _STATIC_PROPERTIES:
                self._static[_STATIC_PROPERTIES[key]] = value
        return self

    def endpoint(self, endpoint: str) -> "ContextBuilder":
        self._endpoint = endpoint
        return self

    def name(self, name: str) -> "ContextBuilder":
        self._name = name
        return self

    def capabilities(self, capabilities: SdkCapabilities) -> "ContextBuilder":
        """Installed vendor SDKs; detected at build time when not given."""
        self._capabilities = capabilities
        return self

    def settings(self, settings: Settings) -> "ContextBuilder":
        """Settings to use instead of the process environment."""
        self._settings = settings
        return self

    def get_name(self) -> str:
        return self._name or self.metadata.id

    def get_endpoint(self) -> Optional[str]:
        return self._endpoint or self._overrides.get(PROPERTY_ENDPOINT) or self.metadata.default_endpoint

    def get_properties(self) -> Dict[str, str]:
        properties = dict(self.metadata.default_properties)
        properties.update(self._overrides)
        return properties

    def _resolved_settings(self) -> Settings:
        return self._settings or get_settings()

    def _resolved_capabilities(self) -> SdkCapabilities:
        if self._capabilities is None:
            self._capabilities = detect_sdk_capabilities()
        return self._capabilities

    def _resolver(self) -> CredentialPriorityResolver:
        settings = self._resolved_settings()
        capabilities = self._resolved_capabilities()
        return CredentialPriorityResolver(
            explicit_supplier=self._supplier,
            explicit_identity=self._static.get("identity", settings.identity),
            explicit_credential=self._static.get("credential", settings.credential),
            ambient=self.metadata.ambient_provider(capabilities, settings=settings),
            default_supplier=self.metadata.default_supplier,
            default_identity=self.metadata.default_identity,
            default_credential=self.metadata.default_credential,
            context_name=self.get_name(),
        )

    def select_credentials_source(self) -> CredentialSelection:
        return self._resolver().select()

    def build_credentials_supplier(self) -> CredentialsSupplier:
        """
        Resolve the credential source once and return its supplier.

        Raises:
            ConfigurationError: If no credential source can be resolved
        """
        return self._resolver().resolve()

    def build_datasource_context(self) -> DataSourceContext:
        """
        Build a data source context for a data source provider.

        The supplier is called once here: its identity becomes the database
        user and an empty credential switches the data source to token
        authentication.

        Raises:
            ConfigurationError: If the provider has no data source support, no
                endpoint is configured, or no credentials can be resolved
        """
        if not self.metadata.supports_datasource:
            raise ConfigurationError(f"Provider {self.metadata.id} does not support data source contexts")
        endpoint = self.get_endpoint()
        if not endpoint:
            raise ConfigurationError(f"No endpoint configured for {self.get_name()}")

        credentials = self.build_credentials_supplier()()
        module = self.metadata.context_module(self._resolved_capabilities(), settings=self._resolved_settings())
        return module.build(endpoint, credentials, self.get_properties(), provider=self.get_name())
