"""
Entra ID access tokens for Azure Database for PostgreSQL and MySQL.

The token is requested for the OSS RDBMS scope and sent as the connection
password. Tokens are valid for about one hour; azure-identity caches and
refreshes them, and a token is requested for every new connection.
"""
import threading
from typing import Optional

from cloudctx.core.auth.azure_provider import AzureCredentialsProvider
from cloudctx.core.auth.providers import get_ambient_provider
from cloudctx.core.config import detect_sdk_capabilities
from cloudctx.core.errors import TokenGenerationFailure
from cloudctx.datasource.auth import DbAuthTokenGenerator

AZURE_OSSRDBMS_SCOPE = "https://ossrdbms-aad.database.windows.net/.default"


class AzureDbAuthTokenGenerator(DbAuthTokenGenerator):
    """Generates Entra ID tokens for Azure Database connections."""

    def __init__(self, credentials_provider: Optional[AzureCredentialsProvider] = None):
        self._credentials_provider = credentials_provider
        self._lock = threading.Lock()

    def _get_provider(self) -> AzureCredentialsProvider:
        if self._credentials_provider is None:
            with self._lock:
                if self._credentials_provider is None:
                    self._credentials_provider = get_ambient_provider("azure", detect_sdk_capabilities())
        return self._credentials_provider

    def generate_token(self) -> str:
        try:
            return self._get_provider().resolve(AZURE_OSSRDBMS_SCOPE).credential
        except Exception as e:
            raise TokenGenerationFailure(f"Failed to generate Azure Entra ID database token: {e}") from e
