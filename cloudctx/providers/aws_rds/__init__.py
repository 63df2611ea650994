from .auth import RdsDbAuthTokenGenerator
from .datasource import AWS_RDS_POOL_NAME, AwsRdsContextModule, RdsDataSource

__all__ = [
    'RdsDbAuthTokenGenerator',
    'AWS_RDS_POOL_NAME',
    'AwsRdsContextModule',
    'RdsDataSource',
]
