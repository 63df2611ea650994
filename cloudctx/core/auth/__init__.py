"""
cloudctx ambient credential providers.

- Provider abstraction with SDK availability gating
- AWS default credential chain (boto3)
- Azure default credential chain (azure-identity)
"""

from .providers import AmbientCredentialsProvider, get_ambient_provider
from .aws_provider import AWSCredentialsProvider
from .azure_provider import AzureCredentialsProvider

__all__ = [
    'AmbientCredentialsProvider',
    'get_ambient_provider',
    'AWSCredentialsProvider',
    'AzureCredentialsProvider',
]
