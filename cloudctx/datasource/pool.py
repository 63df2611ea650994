"""
Connection pooling for token-backed data sources.

The pool never sees a password. Every physical connection it opens goes
through a connection class bound to one data source, whose connect() asks
the data source for the credentials of that single attempt. With token
authentication this means a freshly generated token per connection; with a
static password, the stored password.
"""
from typing import Any, Dict, Mapping, Optional, Type, TYPE_CHECKING

import psycopg
from psycopg_pool import ConnectionPool
from pydantic import BaseModel, ConfigDict, Field

from cloudctx.core.errors import ConfigurationError
from cloudctx.core.logger import setup_logger
from cloudctx.datasource.constants import (
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_MAX_LIFETIME,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_IDLE,
    PROPERTY_DATASOURCE_CONNECTION_TIMEOUT,
    PROPERTY_DATASOURCE_IDLE_TIMEOUT,
    PROPERTY_DATASOURCE_MAX_LIFETIME,
    PROPERTY_DATASOURCE_MAX_POOL_SIZE,
    PROPERTY_DATASOURCE_MIN_IDLE,
)

if TYPE_CHECKING:
    from cloudctx.datasource.source import DataSource

logger = setup_logger(__name__, include_location=True)


def _property_int(properties: Mapping[str, Any], name: str, default: int) -> int:
    raw = properties.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r} (expected an integer)") from e


class PoolSettings(BaseModel):
    """Pool sizing and timing. Durations are milliseconds, as configured."""
    model_config = ConfigDict(frozen=True)

    max_pool_size: int = Field(DEFAULT_MAX_POOL_SIZE, ge=1)
    min_idle: int = Field(DEFAULT_MIN_IDLE, ge=0)
    connection_timeout: int = Field(DEFAULT_CONNECTION_TIMEOUT, gt=0)
    max_lifetime: int = Field(DEFAULT_MAX_LIFETIME, gt=0)
    idle_timeout: int = Field(DEFAULT_IDLE_TIMEOUT, gt=0)

    @classmethod
    def from_properties(cls, properties: Optional[Mapping[str, Any]] = None) -> "PoolSettings":
        properties = properties or {}
        return cls(
            max_pool_size=_property_int(properties, PROPERTY_DATASOURCE_MAX_POOL_SIZE, DEFAULT_MAX_POOL_SIZE),
            min_idle=_property_int(properties, PROPERTY_DATASOURCE_MIN_IDLE, DEFAULT_MIN_IDLE),
            connection_timeout=_property_int(
                properties, PROPERTY_DATASOURCE_CONNECTION_TIMEOUT, DEFAULT_CONNECTION_TIMEOUT
            ),
            max_lifetime=_property_int(properties, PROPERTY_DATASOURCE_MAX_LIFETIME, DEFAULT_MAX_LIFETIME),
            idle_timeout=_property_int(properties, PROPERTY_DATASOURCE_IDLE_TIMEOUT, DEFAULT_IDLE_TIMEOUT),
        )

    def pool_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for psycopg_pool.ConnectionPool, in seconds."""
        return {
            "min_size": min(self.min_idle, self.max_pool_size),
            "max_size": self.max_pool_size,
            "timeout": self.connection_timeout / 1000.0,
            "max_lifetime": self.max_lifetime / 1000.0,
            "max_idle": self.idle_timeout / 1000.0,
        }


def connection_class_for(source: "DataSource") -> Type[psycopg.Connection]:
    """Build a psycopg connection class that authenticates through `source`."""

    class TokenConnection(psycopg.Connection):

        @classmethod
        def connect(cls, conninfo: str = "", **kwargs):
            credentials = source.credentials_for_next_connection()
            kwargs["user"] = credentials.identity
            kwargs["password"] = credentials.credential
            return super().connect(conninfo, **kwargs)

    TokenConnection.__name__ = f"TokenConnection[{source.pool_name}]"
    return TokenConnection


def create_connection_pool(source: "DataSource", settings: PoolSettings, name: str) -> ConnectionPool:
    """
    Create a closed ConnectionPool for the data source.

    Raises:
        ConfigurationError: If the data source URL cannot be pooled
    """
    conninfo = source.conninfo()
    kwargs = settings.pool_kwargs()
    logger.info(
        f"Creating connection pool: {name} | "
        f"Config: min={kwargs['min_size']}, max={kwargs['max_size']}, timeout={kwargs['timeout']}s, "
        f"max_lifetime={kwargs['max_lifetime']}s, max_idle={kwargs['max_idle']}s, "
        f"auth={'token' if source.uses_token_auth() else 'password'}"
    )
    return ConnectionPool(
        conninfo,
        connection_class=connection_class_for(source),
        name=name,
        open=False,
        **kwargs,
    )


def get_pool_stats(pool: Optional[ConnectionPool]) -> Dict[str, Any]:
    """
    Summarize psycopg_pool statistics.

    Returns:
        Dictionary with name, size, available and waiting counts, or
        {"open": False} when there is no pool yet
    """
    if pool is None:
        return {"open": False}
    try:
        pool_stats = pool.get_stats()
        return {
            "open": True,
            "name": pool.name,
            "size": pool_stats.get("pool_size", 0),
            "available": pool_stats.get("pool_available", 0),
            "waiting": pool_stats.get("requests_waiting", 0),
        }
    except Exception as e:
        logger.debug(f"Could not get stats for pool {pool.name}: {e}")
        return {"open": True, "name": pool.name, "error": str(e)}
