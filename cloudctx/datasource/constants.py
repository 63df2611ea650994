"""Property names and defaults for data source contexts."""

PROPERTY_IDENTITY = "cloudctx.identity"
PROPERTY_CREDENTIAL = "cloudctx.credential"
PROPERTY_ENDPOINT = "cloudctx.endpoint"

PROPERTY_DATASOURCE_MAX_POOL_SIZE = "cloudctx.datasource.max-pool-size"
PROPERTY_DATASOURCE_MIN_IDLE = "cloudctx.datasource.min-idle"
PROPERTY_DATASOURCE_CONNECTION_TIMEOUT = "cloudctx.datasource.connection-timeout"
PROPERTY_DATASOURCE_MAX_LIFETIME = "cloudctx.datasource.max-lifetime"
PROPERTY_DATASOURCE_IDLE_TIMEOUT = "cloudctx.datasource.idle-timeout"

# Timeouts and lifetimes are in milliseconds
DEFAULT_MAX_POOL_SIZE = 10
DEFAULT_MIN_IDLE = 2
DEFAULT_CONNECTION_TIMEOUT = 30000
DEFAULT_MAX_LIFETIME = 1800000
DEFAULT_IDLE_TIMEOUT = 600000

DEFAULT_DATASOURCE_PROPERTIES = {
    PROPERTY_DATASOURCE_MAX_POOL_SIZE: str(DEFAULT_MAX_POOL_SIZE),
    PROPERTY_DATASOURCE_MIN_IDLE: str(DEFAULT_MIN_IDLE),
    PROPERTY_DATASOURCE_CONNECTION_TIMEOUT: str(DEFAULT_CONNECTION_TIMEOUT),
    PROPERTY_DATASOURCE_MAX_LIFETIME: str(DEFAULT_MAX_LIFETIME),
    PROPERTY_DATASOURCE_IDLE_TIMEOUT: str(DEFAULT_IDLE_TIMEOUT),
}

DEFAULT_POOL_NAME = "cloudctx-datasource-pool"
