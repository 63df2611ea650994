"""
JDBC-style database URLs.

    jdbc:postgresql://myserver.postgres.database.azure.com:5432/mydb?sslmode=require
    jdbc:mysql://mydb.abc123.us-east-1.rds.amazonaws.com:3306/mydb

The "jdbc:" prefix is optional. Query parameters are kept and, for
PostgreSQL, passed through to libpq as connection parameters.
"""

from typing import Dict, Optional
from urllib.parse import parse_qsl, urlsplit

from psycopg.conninfo import make_conninfo
from pydantic import BaseModel, ConfigDict, Field

from cloudctx.core.errors import ConfigurationError

JDBC_PREFIX = "jdbc:"

DEFAULT_PORTS = {
    "postgresql": 5432,
    "postgres": 5432,
    "mysql": 3306,
}


class DatabaseUrl(BaseModel):
    model_config = ConfigDict(frozen=True)

    scheme: str
    host: str
    port: int
    database: Optional[str] = None
    params: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_postgresql(self) -> bool:
        return self.scheme in ("postgresql", "postgres")

    def conninfo(self) -> str:
        """libpq connection string without user or password."""
        if not self.is_postgresql:
            raise ConfigurationError(
                f"Cannot open {self.scheme} connections: only postgresql URLs are supported by the connection pool"
            )
        return make_conninfo(host=self.host, port=self.port, dbname=self.database, **self.params)


def parse_database_url(url: str) -> DatabaseUrl:
    """
    Parse a JDBC-style URL into its parts.

    Raises:
        ConfigurationError: If the URL has no scheme or host, or no port can be
            inferred for its scheme
    """
    if not url or not url.strip():
        raise ConfigurationError("Database URL is empty")

    raw = url.strip()
    if raw.lower().startswith(JDBC_PREFIX):
        raw = raw[len(JDBC_PREFIX):]

    parsed = urlsplit(raw)
    scheme = parsed.scheme.lower()
    if not scheme or not parsed.hostname:
        raise ConfigurationError(f"Invalid database URL: {url}")

    try:
        port = parsed.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid port in database URL: {url}") from e
    if port is None:
        port = DEFAULT_PORTS.get(scheme)
        if port is None:
            raise ConfigurationError(f"No port in database URL and no default for scheme '{scheme}': {url}")

    database = parsed.path.lstrip("/") or None
    return DatabaseUrl(
        scheme=scheme,
        host=parsed.hostname,
        port=port,
        database=database,
        params=dict(parse_qsl(parsed.query)),
    )
