"""
Amazon RDS data source with IAM authentication.

    datasource = RdsDataSource("jdbc:postgresql://mydb.abc123.us-east-1.rds.amazonaws.com:5432/app")
    datasource.username = "app_user"
    datasource.set_password("")  # IAM tokens from the ambient AWS credentials
"""
from typing import Optional

from cloudctx.core.auth.aws_provider import AWSCredentialsProvider
from cloudctx.core.auth.providers import get_ambient_provider
from cloudctx.core.errors import ConfigurationError
from cloudctx.datasource.module import DataSourceContextModule
from cloudctx.datasource.source import DataSource
from .auth import RdsDbAuthTokenGenerator

AWS_RDS_POOL_NAME = "cloudctx-aws-rds-pool"


class RdsDataSource(DataSource):

    def __init__(self, url: str, *args, credentials_provider: Optional[AWSCredentialsProvider] = None, **kwargs):
        self.credentials_provider = credentials_provider
        super().__init__(url, *args, **kwargs)

    def create_auth_token_generator(self) -> RdsDbAuthTokenGenerator:
        provider = self.credentials_provider
        if provider is not None and not provider.is_available():
            raise provider.missing_sdk_error()
        if not self.username:
            raise ConfigurationError("A database username is required for RDS IAM authentication")
        return RdsDbAuthTokenGenerator(self.host, self.port, self.username, credentials_provider=provider)


class AwsRdsContextModule(DataSourceContextModule):
    datasource_class = RdsDataSource
    pool_name = AWS_RDS_POOL_NAME

    def create_datasource(self, endpoint: str) -> RdsDataSource:
        provider = get_ambient_provider("aws", self.capabilities, settings=self.settings)
        return RdsDataSource(endpoint, credentials_provider=provider)
