"""
Provider descriptors and provider-specific data sources.
"""

from .registry import ProviderMetadata, get_provider_metadata, list_providers, register_provider

__all__ = [
    'ProviderMetadata',
    'get_provider_metadata',
    'list_providers',
    'register_provider',
]
