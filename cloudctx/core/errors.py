"""
Exceptions raised by credential resolution and token-backed data sources.

ConfigurationError is fatal to context construction. ResolutionFailure and
TokenGenerationFailure surface from a single resolution or connection attempt
and are never retried or masked here; the connection pool decides when to try
again.
"""

from typing import Optional


class CloudCtxError(Exception):
    """Base exception for cloudctx errors."""
    pass


class ConfigurationError(CloudCtxError):
    """
    No credential source could be resolved, or an ambient source was
    requested while its vendor SDK is not installed.
    """

    def __init__(self, message: str, missing_field: Optional[str] = None):
        super().__init__(message)
        self.missing_field = missing_field


class ResolutionFailure(CloudCtxError):
    """An ambient SDK call failed (network error, expired SSO session, no identity)."""
    pass


class TokenGenerationFailure(CloudCtxError):
    """A provider-specific token request or signing call failed."""
    pass
