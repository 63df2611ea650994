"""
Credential value types.

Both models are frozen snapshots. Resolvers build a new instance on every call
and callers drop it right after use, so nothing here is ever refreshed in place.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credentials(BaseModel):
    """
    Identity and secret pair.

    The identity is an access key id, an account name or a database user. The
    credential may be the empty string only when it is handed to a data source
    as the marker for token based authentication.
    """
    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., description="Access key id, account name or database user")
    credential: str = Field(default="", repr=False, description="Secret key, password or token")

    @field_validator('identity', mode='before')
    def validate_identity(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("identity cannot be empty")
        return v

    @field_validator('credential', mode='before')
    def coerce_credential(cls, v):
        return "" if v is None else v

    @classmethod
    def of(cls, identity: str, credential: Optional[str]) -> "Credentials":
        return cls(identity=identity, credential=credential)


class SessionCredentials(Credentials):
    """
    Temporary credentials carrying a session token.

    expiration=None means the expiry is unknown or managed by the vendor SDK,
    not that the grant never expires.
    """

    session_token: str = Field(..., repr=False)
    expiration: Optional[datetime] = None

    @field_validator('expiration', mode='before')
    def coerce_expiration(cls, v):
        # azure-identity reports expiry as an epoch int
        if isinstance(v, (int, float)):
            return datetime.fromtimestamp(v, tz=timezone.utc)
        return v

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return True when a known expiration lies in the past."""
        if self.expiration is None:
            return False
        now = now or datetime.now(timezone.utc)
        expiration = self.expiration
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        return now >= expiration


CredentialsSupplier = Callable[[], Credentials]


def static_supplier(credentials: Credentials) -> CredentialsSupplier:
    """Return a supplier that always yields the same fixed credentials."""
    def supplier() -> Credentials:
        return credentials
    return supplier
