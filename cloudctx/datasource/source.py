"""
Token-backed connection source.

A DataSource holds a database URL, a username and an authentication mode:

- StaticPassword: the stored password is sent on every connection.
- DynamicToken:   a DbAuthTokenGenerator is asked for a new token on every
                  physical connection attempt. Tokens are never cached, so a
                  pool keeps working across token expiry and key rotation.

Provider data sources (RDS, Azure Database) override
create_auth_token_generator(); an empty password then switches them to token
authentication.
"""
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Union

import psycopg
from psycopg_pool import ConnectionPool
from pydantic import BaseModel, ConfigDict, Field

from cloudctx.core.credentials import Credentials
from cloudctx.core.errors import ConfigurationError, TokenGenerationFailure
from cloudctx.core.logger import setup_logger
from cloudctx.datasource.auth import DbAuthTokenGenerator
from cloudctx.datasource.constants import DEFAULT_POOL_NAME
from cloudctx.datasource.pool import PoolSettings, connection_class_for, create_connection_pool, get_pool_stats
from cloudctx.datasource.url import DatabaseUrl, parse_database_url

logger = setup_logger(__name__, include_location=True)


class StaticPassword(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1, repr=False)


class DynamicToken(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    generator: DbAuthTokenGenerator


AuthMode = Union[StaticPassword, DynamicToken]


class DataSource:
    """
    Pooled database connection source with per-connection credentials.

    Args:
        url: JDBC-style database URL
        username: Database user
        auth: Initial authentication mode; may be set later with
              set_password() or configure_auth()
        pool_settings: Pool sizing and timing
        pool_name: Name of the connection pool
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        auth: Optional[AuthMode] = None,
        pool_settings: Optional[PoolSettings] = None,
        pool_name: str = DEFAULT_POOL_NAME,
    ):
        self.url = url
        self.username = username
        self.pool_settings = pool_settings or PoolSettings()
        self.pool_name = pool_name
        self._database_url: DatabaseUrl = parse_database_url(url)
        self._auth: Optional[AuthMode] = auth
        self._pool: Optional[ConnectionPool] = None
        self._pool_lock = threading.Lock()

    @property
    def host(self) -> str:
        return self._database_url.host

    @property
    def port(self) -> int:
        return self._database_url.port

    @property
    def database(self) -> Optional[str]:
        return self._database_url.database

    @property
    def auth(self) -> Optional[AuthMode]:
        return self._auth

    def uses_token_auth(self) -> bool:
        return isinstance(self._auth, DynamicToken)

    def set_password(self, password: Optional[str]) -> None:
        """
        Set a static password, or switch to token authentication when the
        password is None or empty. A non-empty password discards any token
        generator configured earlier.
        """
        if password:
            self.configure_auth(StaticPassword(value=password))
        else:
            self.configure_auth(DynamicToken(generator=self.create_auth_token_generator()))

    def configure_auth(self, mode: AuthMode) -> None:
        self._auth = mode
        logger.debug(
            f"Data source {self.pool_name} uses "
            f"{'token' if isinstance(mode, DynamicToken) else 'password'} authentication"
        )

    def create_auth_token_generator(self) -> DbAuthTokenGenerator:
        """Token generator used for empty passwords. Provider data sources override this."""
        raise ConfigurationError(
            f"Data source {type(self).__name__} does not support token authentication; "
            f"a non-empty password is required"
        )

    def credentials_for_next_connection(self) -> Credentials:
        """
        Credentials for exactly one physical connection attempt.

        Raises:
            ConfigurationError: If no username or authentication mode is configured
            TokenGenerationFailure: If the token generator fails; there is no
                fallback to a previous token or an empty password
        """
        if not self.username:
            raise ConfigurationError(f"Data source {self.pool_name} has no username configured")
        mode = self._auth
        if mode is None:
            raise ConfigurationError(
                f"Data source {self.pool_name} has no authentication configured; "
                f"call set_password() or configure_auth() first"
            )

        if isinstance(mode, StaticPassword):
            return Credentials(identity=self.username, credential=mode.value)

        try:
            token = mode.generator.generate_token()
        except TokenGenerationFailure:
            raise
        except Exception as e:
            raise TokenGenerationFailure(
                f"Failed to generate authentication token for {self.username}@{self.host}:{self.port}"
            ) from e
        if not token:
            raise TokenGenerationFailure(
                f"Token generator returned an empty token for {self.username}@{self.host}:{self.port}"
            )
        logger.debug(f"Generated authentication token for {self.username}@{self.host}:{self.port} (length={len(token)})")
        return Credentials(identity=self.username, credential=token)

    def conninfo(self) -> str:
        return self._database_url.conninfo()

    def connect(self, **kwargs) -> psycopg.Connection:
        """Open a single unpooled connection with fresh credentials."""
        return connection_class_for(self).connect(self.conninfo(), **kwargs)

    def open_pool(self, wait: bool = False) -> ConnectionPool:
        """
        Create and open the connection pool on first use.

        Args:
            wait: Block until the pool holds its minimum number of connections
        """
        if self._pool is None:
            with self._pool_lock:
                if self._pool is None:
                    pool = create_connection_pool(self, self.pool_settings, self.pool_name)
                    try:
                        pool.open(wait=wait, timeout=self.pool_settings.connection_timeout / 1000.0)
                    except Exception as e:
                        logger.error(f"Failed to open connection pool {self.pool_name}: {e}")
                        raise
                    self._pool = pool
                    logger.info(f"Connection pool opened: {self.pool_name}")
        return self._pool

    @contextmanager
    def connection(self) -> Iterator[psycopg.Connection]:
        """
        Borrow a pooled connection; it is returned to the pool on exit.

        Usage:
            with datasource.connection() as conn:
                conn.execute("SELECT 1")
        """
        pool = self.open_pool()
        logger.debug(f"Acquiring connection from {self.pool_name}")

        acquire_start = time.time()
        try:
            with pool.connection() as conn:
                acquire_time = time.time() - acquire_start
                logger.debug(f"Connection acquired from {self.pool_name} in {acquire_time*1000:.1f}ms")

                yield conn
                release_start = time.time()
            release_time = time.time() - release_start
            logger.debug(f"Connection returned to {self.pool_name} (release took {release_time*1000:.1f}ms)")
        except Exception as e:
            acquire_time = time.time() - acquire_start
            logger.error(f"Failed to acquire/use connection from {self.pool_name} after {acquire_time:.2f}s: {e}")
            raise

    def get_pool_stats(self) -> Dict[str, Any]:
        return get_pool_stats(self._pool)

    def close(self) -> None:
        """Close the pool if it was opened. Safe to call more than once."""
        with self._pool_lock:
            pool, self._pool = self._pool, None
        if pool is None:
            return
        logger.info(f"Closing connection pool: {self.pool_name}")
        try:
            pool.close()
        except Exception as e:
            logger.exception(f"Error closing connection pool {self.pool_name}: {e}")

    def __repr__(self) -> str:
        mode = "token" if self.uses_token_auth() else ("password" if self._auth else "unconfigured")
        return f"{type(self).__name__}(url={self.url!r}, username={self.username!r}, auth={mode})"
