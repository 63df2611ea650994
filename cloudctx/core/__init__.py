from .credentials import Credentials, CredentialsSupplier, SessionCredentials, static_supplier
from .errors import CloudCtxError, ConfigurationError, ResolutionFailure, TokenGenerationFailure
from .resolver import CredentialPriorityResolver, CredentialSelection, CredentialSource

__all__ = [
    'Credentials',
    'CredentialsSupplier',
    'SessionCredentials',
    'static_supplier',
    'CloudCtxError',
    'ConfigurationError',
    'ResolutionFailure',
    'TokenGenerationFailure',
    'CredentialPriorityResolver',
    'CredentialSelection',
    'CredentialSource',
]
