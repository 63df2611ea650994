"""
Token-backed database connection sources.

- DataSource with static password or per-connection token authentication
- psycopg_pool connection pooling
- Context assembly from resolved credentials and pool properties
"""

from .auth import DbAuthTokenGenerator
from .context import DataSourceContext
from .module import DataSourceContextModule
from .pool import PoolSettings
from .source import AuthMode, DataSource, DynamicToken, StaticPassword
from .url import DatabaseUrl, parse_database_url

__all__ = [
    'DbAuthTokenGenerator',
    'DataSourceContext',
    'DataSourceContextModule',
    'PoolSettings',
    'AuthMode',
    'DataSource',
    'DynamicToken',
    'StaticPassword',
    'DatabaseUrl',
    'parse_database_url',
]
