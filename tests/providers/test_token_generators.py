"""
Unit tests for the RDS IAM and Azure Entra ID token generators.
"""

import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from cloudctx.core.auth.aws_provider import AWSCredentialsProvider
from cloudctx.core.auth.azure_provider import AzureCredentialsProvider
from cloudctx.core.credentials import SessionCredentials
from cloudctx.core.errors import ConfigurationError, TokenGenerationFailure
from cloudctx.providers.aws_rds.auth import RdsDbAuthTokenGenerator
from cloudctx.providers.azure_database.auth import AZURE_OSSRDBMS_SCOPE, AzureDbAuthTokenGenerator


def _aws_provider(region="eu-west-1"):
    provider = MagicMock(spec=AWSCredentialsProvider)
    provider.region.return_value = region
    rds_client = provider.client.return_value
    counter = iter(range(1, 1000))
    rds_client.generate_db_auth_token.side_effect = lambda **kwargs: (
        f"{kwargs['DBHostname']}:{kwargs['Port']}/?Action=connect&DBUser={kwargs['DBUsername']}"
        f"&X-Amz-Signature=sig{next(counter)}"
    )
    return provider


class TestRdsDbAuthTokenGenerator:

    def setup_method(self):
        self.provider = _aws_provider()
        self.generator = RdsDbAuthTokenGenerator(
            "mydb.abc123.eu-west-1.rds.amazonaws.com", 5432, "app_user", credentials_provider=self.provider
        )

    def test_generates_signed_token(self):
        token = self.generator.generate_token()

        assert token.startswith("mydb.abc123.eu-west-1.rds.amazonaws.com:5432/?Action=connect&DBUser=app_user")
        self.provider.client.return_value.generate_db_auth_token.assert_called_once_with(
            DBHostname="mydb.abc123.eu-west-1.rds.amazonaws.com",
            Port=5432,
            DBUsername="app_user",
            Region="eu-west-1",
        )

    def test_every_call_generates_a_new_token(self):
        tokens = [self.generator.generate_token() for _ in range(3)]

        assert len(set(tokens)) == 3
        assert self.provider.client.return_value.generate_db_auth_token.call_count == 3

    def test_client_and_region_are_initialized_once(self):
        for _ in range(3):
            self.generator.generate_token()

        self.provider.region.assert_called_once()
        self.provider.client.assert_called_once_with("rds", region="eu-west-1")

    def test_explicit_region_skips_detection(self):
        generator = RdsDbAuthTokenGenerator(
            "db.example.com", 3306, "app_user", region="us-west-2", credentials_provider=self.provider
        )

        generator.generate_token()

        self.provider.region.assert_not_called()
        self.provider.client.assert_called_once_with("rds", region="us-west-2")

    def test_concurrent_first_use_initializes_once(self):
        def slow_client(service_name, region=None):
            time.sleep(0.01)
            return client

        client = MagicMock()
        client.generate_db_auth_token.return_value = "token"
        self.provider.client.side_effect = slow_client
        errors = []

        def worker():
            try:
                self.generator.generate_token()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert self.provider.client.call_count == 1
        assert client.generate_db_auth_token.call_count == 8

    def test_signing_failure_is_wrapped(self):
        error = RuntimeError("credentials expired")
        self.provider.client.return_value.generate_db_auth_token.side_effect = error

        with pytest.raises(TokenGenerationFailure) as exc_info:
            self.generator.generate_token()

        assert exc_info.value.__cause__ is error

    def test_missing_sdk_surfaces_as_token_failure(self):
        generator = RdsDbAuthTokenGenerator(
            "db.example.com", 5432, "app_user", credentials_provider=AWSCredentialsProvider(available=False)
        )

        with pytest.raises(TokenGenerationFailure) as exc_info:
            generator.generate_token()

        assert isinstance(exc_info.value.__cause__, ConfigurationError)

    def test_default_provider_is_the_ambient_aws_chain(self):
        provider = _aws_provider()
        generator = RdsDbAuthTokenGenerator("db.example.com", 5432, "app_user")

        with patch("cloudctx.providers.aws_rds.auth.get_ambient_provider", return_value=provider) as factory:
            generator.generate_token()
            generator.generate_token()

        factory.assert_called_once()
        assert factory.call_args.args[0] == "aws"


class TestAzureDbAuthTokenGenerator:

    def setup_method(self):
        self.provider = MagicMock(spec=AzureCredentialsProvider)
        counter = iter(range(1, 1000))
        self.provider.resolve.side_effect = lambda scope=None: SessionCredentials(
            identity="azure-token",
            credential=f"entra-token-{next(counter)}",
            session_token="unused",
            expiration=1_700_000_000,
        )
        self.generator = AzureDbAuthTokenGenerator(credentials_provider=self.provider)

    def test_requests_the_database_scope(self):
        token = self.generator.generate_token()

        assert token == "entra-token-1"
        self.provider.resolve.assert_called_once_with(AZURE_OSSRDBMS_SCOPE)

    def test_every_call_requests_a_token(self):
        tokens = [self.generator.generate_token() for _ in range(3)]

        assert tokens == ["entra-token-1", "entra-token-2", "entra-token-3"]
        assert self.provider.resolve.call_count == 3

    def test_failure_is_wrapped(self):
        self.provider.resolve.side_effect = RuntimeError("ManagedIdentityCredential unavailable")

        with pytest.raises(TokenGenerationFailure) as exc_info:
            self.generator.generate_token()

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_default_provider_is_the_ambient_azure_chain(self):
        with patch(
            "cloudctx.providers.azure_database.auth.get_ambient_provider", return_value=self.provider
        ) as factory:
            generator = AzureDbAuthTokenGenerator()
            generator.generate_token()
            generator.generate_token()

        factory.assert_called_once()
        assert factory.call_args.args[0] == "azure"
