"""
Azure ambient credentials via azure-identity.

DefaultAzureCredential tries, in order: environment variables
(AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET), workload identity,
managed identity, the Azure CLI, Azure PowerShell and developer tool logins.

When the pod carries workload identity markers (a federated token file plus
client and tenant ids) a WorkloadIdentityCredential is tried first, ahead of
the generic chain.

azure-identity is optional. Install it with `pip install cloudctx[azure]`.
"""

import os
from typing import Any, Mapping, Optional

from cloudctx.core.credentials import Credentials, SessionCredentials
from cloudctx.core.errors import ResolutionFailure
from cloudctx.core.logger import preview
from .providers import AmbientCredentialsProvider

DEFAULT_SCOPE = "https://management.azure.com/.default"
TOKEN_IDENTITY = "azure-token"

WORKLOAD_IDENTITY_MARKERS = ("AZURE_FEDERATED_TOKEN_FILE", "AZURE_CLIENT_ID", "AZURE_TENANT_ID")

FAILED_RESOLUTION_MESSAGE = (
    "Failed to retrieve Azure credentials.\n"
    "Note: Either use Azure credentials configured on your local machine by running 'az login' "
    "or 'Connect-AzAccount', or run your program or service in an environment that provides "
    "ambient Azure credentials, such as:\n"
    "- Azure VM with Managed Identity\n"
    "- Azure App Service with Managed Identity\n"
    "- Azure Functions with Managed Identity\n"
    "- Azure Kubernetes Service (AKS) pod with Managed Identity or Workload Identity"
)


def has_workload_identity(env: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if env is None else env
    return all(env.get(name) for name in WORKLOAD_IDENTITY_MARKERS)


def build_token_credential(env: Optional[Mapping[str, str]] = None) -> Any:
    """Build the azure-identity credential chain for this environment."""
    from azure.identity import ChainedTokenCredential, DefaultAzureCredential, WorkloadIdentityCredential

    if has_workload_identity(env):
        return ChainedTokenCredential(WorkloadIdentityCredential(), DefaultAzureCredential())
    return DefaultAzureCredential()


class AzureCredentialsProvider(AmbientCredentialsProvider):
    """
    Resolves Entra ID access tokens for a requested scope.

    The token credential is built once; azure-identity keeps its own in-memory
    token cache and refreshes tokens close to expiry, so get_token() is called
    on every resolve().
    """

    vendor = "Azure"
    required_distributions = ("azure-identity", "azure-core")
    ambient_examples = "Managed Identity, Workload Identity, Azure CLI, Azure PowerShell, etc."
    example_provider = "azure"
    example_identity = "accountName"
    example_credential = "accountKey"

    def __init__(self, available: bool, debug: bool = False, logger=None, credential_factory=None):
        super().__init__(available, debug=debug, logger=logger)
        self._credential_factory = credential_factory or build_token_credential

    def _create_client(self) -> Any:
        self.logger.info("Building Azure credential chain...")
        try:
            credential = self._credential_factory()
        except Exception as e:
            raise ResolutionFailure(FAILED_RESOLUTION_MESSAGE) from e
        self.logger.info(f"Successfully created Azure credential chain: {type(credential).__name__}")
        return credential

    def _resolve_credentials(self, credential: Any, scope: Optional[str]) -> Credentials:
        scope = scope or DEFAULT_SCOPE
        self.logger.info(f"Requesting Azure access token for scope: {scope}")
        try:
            token = credential.get_token(scope)
        except Exception as e:
            raise ResolutionFailure(f"Failed to retrieve Azure access token for scope {scope}") from e

        credentials = SessionCredentials(
            identity=TOKEN_IDENTITY,
            credential=token.token,
            session_token=token.token,
            expiration=token.expires_on,
        )
        self.logger.info("Successfully retrieved Azure access token")
        self.logger.info(f"- Token: {preview(token.token, 20)}")
        self.logger.info(f"- Expires at: {credentials.expiration}")
        return credentials

    def default_parameter(self) -> str:
        return DEFAULT_SCOPE
