__version__ = "0.1.0"

from cloudctx.context import ContextBuilder
from cloudctx.core.config import SdkCapabilities, detect_sdk_capabilities
from cloudctx.core.credentials import Credentials, SessionCredentials
from cloudctx.core.errors import ConfigurationError, ResolutionFailure, TokenGenerationFailure

__all__ = [
    '__version__',
    'ContextBuilder',
    'SdkCapabilities',
    'detect_sdk_capabilities',
    'Credentials',
    'SessionCredentials',
    'ConfigurationError',
    'ResolutionFailure',
    'TokenGenerationFailure',
]
