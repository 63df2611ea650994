"""
Provider descriptors.

A descriptor names a provider, tells the context builder where ambient
credentials come from (if anywhere), which defaults to fall back on, and
which module assembles its data source context. Ambient credentials come
from a vendor chain built by ambient_factory or from a plain default_supplier.

- aws, azure:               credential-only contexts backed by the vendor chains
- aws-rds, azure-database:  data source contexts with token authentication
"""
from functools import partial
from typing import Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from cloudctx.core.auth.providers import AmbientCredentialsProvider, get_ambient_provider
from cloudctx.core.config import SdkCapabilities, Settings
from cloudctx.core.credentials import CredentialsSupplier
from cloudctx.core.errors import ConfigurationError
from cloudctx.datasource.constants import DEFAULT_DATASOURCE_PROPERTIES
from cloudctx.datasource.module import DataSourceContextModule
from cloudctx.providers.aws_rds.datasource import AwsRdsContextModule
from cloudctx.providers.azure_database.datasource import AzureDatabaseContextModule

AmbientFactory = Callable[..., AmbientCredentialsProvider]


class ProviderMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    name: str
    identity_name: str = "Identity"
    credential_name: Optional[str] = "Credential"
    default_endpoint: Optional[str] = None
    default_identity: Optional[str] = None
    default_credential: Optional[str] = None
    ambient_factory: Optional[AmbientFactory] = None
    default_supplier: Optional[CredentialsSupplier] = None
    default_properties: Dict[str, str] = Field(default_factory=dict)
    context_module: Optional[Type[DataSourceContextModule]] = None
    documentation: Optional[str] = None

    def ambient_provider(
        self, capabilities: SdkCapabilities, settings: Optional[Settings] = None
    ) -> Optional[AmbientCredentialsProvider]:
        if self.ambient_factory is None:
            return None
        return self.ambient_factory(capabilities, settings=settings)

    @property
    def supports_datasource(self) -> bool:
        return self.context_module is not None


_PROVIDERS: Dict[str, ProviderMetadata] = {
    provider.id: provider
    for provider in (
        ProviderMetadata(
            id="aws",
            name="Amazon Web Services",
            identity_name="Access Key ID",
            credential_name="Secret Access Key",
            ambient_factory=partial(get_ambient_provider, "aws"),
            documentation="https://docs.aws.amazon.com/sdkref/latest/guide/standardized-credentials.html",
        ),
        ProviderMetadata(
            id="azure",
            name="Microsoft Azure",
            identity_name="Account Name",
            credential_name="Account Key",
            ambient_factory=partial(get_ambient_provider, "azure"),
            documentation="https://learn.microsoft.com/en-us/python/api/overview/azure/identity-readme",
        ),
        ProviderMetadata(
            id="aws-rds",
            name="Amazon RDS with IAM Authentication",
            identity_name="Database Username",
            credential_name="Database Password (leave empty for IAM auth)",
            default_endpoint="jdbc:mysql://localhost:3306/mydb",
            default_properties=dict(DEFAULT_DATASOURCE_PROPERTIES),
            context_module=AwsRdsContextModule,
            documentation="https://docs.aws.amazon.com/AmazonRDS/latest/UserGuide/UsingWithRDS.IAMDBAuth.html",
        ),
        ProviderMetadata(
            id="azure-database",
            name="Azure Database with Entra ID Authentication",
            identity_name="Database Username",
            credential_name="Database Password (leave empty for Entra ID auth)",
            default_endpoint=(
                "jdbc:postgresql://myserver.postgres.database.azure.com:5432/mydatabase?sslmode=require"
            ),
            default_properties=dict(DEFAULT_DATASOURCE_PROPERTIES),
            context_module=AzureDatabaseContextModule,
            documentation=(
                "https://learn.microsoft.com/en-us/azure/postgresql/flexible-server/"
                "how-to-configure-sign-in-azure-ad-authentication"
            ),
        ),
    )
}


def get_provider_metadata(provider_id: str) -> ProviderMetadata:
    """
    Raises:
        ConfigurationError: If no provider is registered under the id
    """
    metadata = _PROVIDERS.get(provider_id)
    if metadata is None:
        raise ConfigurationError(
            f"Unknown provider: {provider_id}. Supported providers: {list_providers()}"
        )
    return metadata


def list_providers() -> List[str]:
    return sorted(_PROVIDERS)


def register_provider(metadata: ProviderMetadata) -> None:
    """Register a descriptor, replacing any existing one with the same id."""
    _PROVIDERS[metadata.id] = metadata
