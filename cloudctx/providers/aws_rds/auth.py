"""
IAM database authentication tokens for Amazon RDS.

A token is a SigV4-signed connect request generated locally by botocore from
the current AWS credentials; no network call is made. Tokens are valid for
15 minutes and are generated for every new connection.

Tokens signed with permanent access keys work, but AWS recommends temporary
credentials (instance roles, IRSA, SSO) for IAM database authentication.
"""
import threading
from typing import Any, Optional

from cloudctx.core.auth.aws_provider import AWSCredentialsProvider
from cloudctx.core.auth.providers import get_ambient_provider
from cloudctx.core.config import detect_sdk_capabilities
from cloudctx.core.errors import TokenGenerationFailure
from cloudctx.core.logger import setup_logger
from cloudctx.datasource.auth import DbAuthTokenGenerator

logger = setup_logger(__name__, include_location=True)


class RdsDbAuthTokenGenerator(DbAuthTokenGenerator):
    """
    Generates RDS IAM authentication tokens for one host, port and user.

    The region and the boto3 rds client are resolved on the first
    generate_token() call, once, under a lock.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        region: Optional[str] = None,
        credentials_provider: Optional[AWSCredentialsProvider] = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.region = region
        self._credentials_provider = credentials_provider
        self._client: Any = None
        self._lock = threading.Lock()

    def _get_client(self) -> Any:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    provider = self._credentials_provider
                    if provider is None:
                        provider = get_ambient_provider("aws", detect_sdk_capabilities())
                        self._credentials_provider = provider
                    if self.region is None:
                        self.region = provider.region()
                    self._client = provider.client("rds", region=self.region)
                    logger.info(f"Initialized RDS token generation for {self.username}@{self.host}:{self.port} in {self.region}")
        return self._client

    def generate_token(self) -> str:
        try:
            client = self._get_client()
            return client.generate_db_auth_token(
                DBHostname=self.host,
                Port=self.port,
                DBUsername=self.username,
                Region=self.region,
            )
        except TokenGenerationFailure:
            raise
        except Exception as e:
            raise TokenGenerationFailure(
                f"Failed to generate RDS IAM authentication token for {self.username}@{self.host}:{self.port}: {e}"
            ) from e
