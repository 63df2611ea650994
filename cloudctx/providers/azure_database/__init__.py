from .auth import AZURE_OSSRDBMS_SCOPE, AzureDbAuthTokenGenerator
from .datasource import AZURE_DATABASE_POOL_NAME, AzureDatabaseContextModule, AzureDatabaseDataSource

__all__ = [
    'AZURE_OSSRDBMS_SCOPE',
    'AzureDbAuthTokenGenerator',
    'AZURE_DATABASE_POOL_NAME',
    'AzureDatabaseContextModule',
    'AzureDatabaseDataSource',
]
