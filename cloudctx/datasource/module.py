"""
Assembly of data source contexts.

DataSourceContextModule turns an endpoint, the resolved credentials and the
pool properties into a DataSourceContext. Each step is a separate method so
provider modules can swap the data source class or the pool name without
repeating the rest.
"""
from typing import Any, Mapping, Optional, Type

from cloudctx.core.config import SdkCapabilities, Settings
from cloudctx.core.credentials import Credentials
from cloudctx.core.logger import setup_logger
from cloudctx.datasource.constants import DEFAULT_POOL_NAME
from cloudctx.datasource.context import DataSourceContext
from cloudctx.datasource.pool import PoolSettings
from cloudctx.datasource.source import DataSource

logger = setup_logger(__name__, include_location=True)


class DataSourceContextModule:
    """
    Builds a plain data source with static username and password.

    An empty password is only accepted by provider modules whose data source
    supports token authentication.
    """

    datasource_class: Type[DataSource] = DataSource
    pool_name: str = DEFAULT_POOL_NAME

    def __init__(self, capabilities: Optional[SdkCapabilities] = None, settings: Optional[Settings] = None):
        self.capabilities = capabilities or SdkCapabilities()
        self.settings = settings

    def build(
        self,
        endpoint: str,
        credentials: Credentials,
        properties: Optional[Mapping[str, Any]] = None,
        provider: str = "",
    ) -> DataSourceContext:
        datasource = self.create_datasource(endpoint)
        self.configure_credentials(datasource, credentials)
        self.configure_connection_pool(datasource, PoolSettings.from_properties(properties))
        logger.info(f"Configured data source for {provider or 'datasource'}: {datasource!r}")
        return self.create_datasource_context(datasource, provider)

    def create_datasource(self, endpoint: str) -> DataSource:
        return self.datasource_class(endpoint)

    def configure_credentials(self, datasource: DataSource, credentials: Credentials) -> None:
        # username first: token generators are built from it
        datasource.username = credentials.identity
        datasource.set_password(credentials.credential)

    def configure_connection_pool(self, datasource: DataSource, settings: PoolSettings) -> None:
        datasource.pool_settings = settings
        datasource.pool_name = self.pool_name

    def create_datasource_context(self, datasource: DataSource, provider: str = "") -> DataSourceContext:
        return DataSourceContext(datasource, provider=provider)
