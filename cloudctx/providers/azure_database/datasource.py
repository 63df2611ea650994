"""
Azure Database for PostgreSQL/MySQL data source with Entra ID authentication.

The username is the Entra ID principal name as created in the database,
for example "app-identity" or "user@contoso.com".
"""
from typing import Optional

from cloudctx.core.auth.azure_provider import AzureCredentialsProvider
from cloudctx.core.auth.providers import get_ambient_provider
from cloudctx.core.logger import setup_logger
from cloudctx.datasource.module import DataSourceContextModule
from cloudctx.datasource.source import DataSource
from .auth import AzureDbAuthTokenGenerator

logger = setup_logger(__name__, include_location=True)

AZURE_DATABASE_POOL_NAME = "cloudctx-azure-database-pool"


class AzureDatabaseDataSource(DataSource):

    def __init__(self, url: str, *args, credentials_provider: Optional[AzureCredentialsProvider] = None, **kwargs):
        self.credentials_provider = credentials_provider
        super().__init__(url, *args, **kwargs)

    def create_auth_token_generator(self) -> AzureDbAuthTokenGenerator:
        provider = self.credentials_provider
        if provider is not None and not provider.is_available():
            raise provider.missing_sdk_error()
        logger.debug("Empty password provided, enabling Entra ID authentication")
        return AzureDbAuthTokenGenerator(credentials_provider=provider)


class AzureDatabaseContextModule(DataSourceContextModule):
    datasource_class = AzureDatabaseDataSource
    pool_name = AZURE_DATABASE_POOL_NAME

    def create_datasource(self, endpoint: str) -> AzureDatabaseDataSource:
        provider = get_ambient_provider("azure", self.capabilities, settings=self.settings)
        return AzureDatabaseDataSource(endpoint, credentials_provider=provider)
