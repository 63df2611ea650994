"""
Credential source selection.

Given up to four candidate sources, pick exactly one by fixed priority and
expose it as a supplier:

1. explicit supplier   - registered by the caller, returned as is
2. explicit static     - builder credentials(), environment or override properties
3. ambient chain       - vendor SDK default chain when the SDK is installed,
                         otherwise a plain supplier bundled with the descriptor
4. metadata default    - fallback pair bundled with the provider descriptor

First match wins; sources are never merged. Selection runs once per context;
only the values produced by a supplier or ambient source change over time.
"""

from enum import Enum
from typing import NamedTuple, Optional

from cloudctx.core.auth.providers import AmbientCredentialsProvider
from cloudctx.core.credentials import Credentials, CredentialsSupplier, static_supplier
from cloudctx.core.errors import ConfigurationError
from cloudctx.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


class CredentialSource(str, Enum):
    """Credential sources, highest priority first."""

    EXPLICIT_SUPPLIER = "explicit_supplier"
    EXPLICIT_STATIC = "explicit_static"
    AMBIENT_CHAIN = "ambient_chain"
    METADATA_DEFAULT = "metadata_default"

    @property
    def priority(self) -> int:
        return list(CredentialSource).index(self) + 1


class CredentialSelection(NamedTuple):
    source: CredentialSource
    supplier: CredentialsSupplier


def _present(value: Optional[str]) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    return value


class CredentialPriorityResolver:
    """
    Picks the active credential source for a context.

    A descriptor may register an ambient provider without any static defaults;
    that is a complete configuration, not a missing identity.
    """

    def __init__(
        self,
        explicit_supplier: Optional[CredentialsSupplier] = None,
        explicit_identity: Optional[str] = None,
        explicit_credential: Optional[str] = None,
        ambient: Optional[AmbientCredentialsProvider] = None,
        ambient_scope: Optional[str] = None,
        default_supplier: Optional[CredentialsSupplier] = None,
        default_identity: Optional[str] = None,
        default_credential: Optional[str] = None,
        context_name: str = "context",
    ):
        self.explicit_supplier = explicit_supplier
        self.explicit_identity = _present(explicit_identity)
        self.explicit_credential = explicit_credential
        self.ambient = ambient
        self.ambient_scope = ambient_scope
        self.default_supplier = default_supplier
        self.default_identity = _present(default_identity)
        self.default_credential = default_credential
        self.context_name = context_name

    def select(self) -> CredentialSelection:
        """
        Select the highest-priority present source.

        Raises:
            ConfigurationError: If no source resolves; names the missing field,
                or carries the ambient provider's missing-SDK message when an
                ambient source was registered but cannot be used.
        """
        if self.explicit_supplier is not None:
            return self._selected(CredentialSource.EXPLICIT_SUPPLIER, self.explicit_supplier)

        if self.explicit_identity is not None:
            credentials = self._static_pair(self.explicit_identity, self.explicit_credential)
            return self._selected(CredentialSource.EXPLICIT_STATIC, static_supplier(credentials))

        if self.ambient is not None and self.ambient.is_available():
            return self._selected(CredentialSource.AMBIENT_CHAIN, self.ambient.credentials_supplier(self.ambient_scope))

        if self.default_supplier is not None:
            return self._selected(CredentialSource.AMBIENT_CHAIN, self.default_supplier)

        if self.default_identity is not None:
            credentials = self._static_pair(self.default_identity, self.default_credential)
            return self._selected(CredentialSource.METADATA_DEFAULT, static_supplier(credentials))

        if self.ambient is not None:
            raise self.ambient.missing_sdk_error()

        raise self._missing("identity")

    def resolve(self) -> CredentialsSupplier:
        """Return the supplier of the selected source."""
        return self.select().supplier

    def _static_pair(self, identity: str, credential: Optional[str]) -> Credentials:
        if credential is None:
            raise self._missing("credential")
        return Credentials(identity=identity, credential=credential)

    def _selected(self, source: CredentialSource, supplier: CredentialsSupplier) -> CredentialSelection:
        logger.debug(f"Credentials for {self.context_name} come from source: {source.value}")
        return CredentialSelection(source, supplier)

    def _missing(self, field: str) -> ConfigurationError:
        return ConfigurationError(
            f"No credentials configured for {self.context_name}: {field} is not present. "
            f"Provide explicit credentials with .credentials(identity, credential), a supplier with "
            f".credentials_supplier(...), the CLOUDCTX_IDENTITY/CLOUDCTX_CREDENTIAL environment variables "
            f"or the cloudctx.identity/cloudctx.credential properties.",
            missing_field=field,
        )
