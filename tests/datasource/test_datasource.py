"""
Unit tests for the token-backed data source.

Covers static and token authentication, the transitions between them and
the propagation of token generation failures.
"""

import pytest
from pydantic import ValidationError

from cloudctx.core.credentials import Credentials
from cloudctx.core.errors import ConfigurationError, TokenGenerationFailure
from cloudctx.datasource.auth import DbAuthTokenGenerator
from cloudctx.datasource.source import DataSource, DynamicToken, StaticPassword

URL = "jdbc:postgresql://db.example.com:5432/app"


class CountingTokenGenerator(DbAuthTokenGenerator):

    def __init__(self):
        self.count = 0

    def generate_token(self):
        self.count += 1
        return f"token-{self.count}"


class FailingTokenGenerator(DbAuthTokenGenerator):

    def __init__(self, error):
        self.error = error

    def generate_token(self):
        raise self.error


class TokenDataSource(DataSource):
    """Data source whose empty password switches to a counting generator."""

    def create_auth_token_generator(self):
        self.generator = CountingTokenGenerator()
        return self.generator


class TestStaticPassword:

    def test_static_password_is_returned_unchanged(self):
        datasource = TokenDataSource(URL, username="app_user")
        datasource.set_password("s3cret")

        results = [datasource.credentials_for_next_connection() for _ in range(3)]

        assert results == [Credentials.of("app_user", "s3cret")] * 3
        assert datasource.uses_token_auth() is False

    def test_mode_at_construction(self):
        datasource = DataSource(URL, username="app_user", auth=StaticPassword(value="pw"))
        assert datasource.credentials_for_next_connection().credential == "pw"

    def test_empty_static_password_is_rejected(self):
        with pytest.raises(ValidationError):
            StaticPassword(value="")

    def test_repr_hides_password(self):
        datasource = DataSource(URL, username="app_user", auth=StaticPassword(value="s3cret"))
        assert "s3cret" not in repr(datasource)
        assert "password" in repr(datasource)


class TestDynamicToken:

    def setup_method(self):
        self.datasource = TokenDataSource(URL, username="app_user")

    @pytest.mark.parametrize("password", ["", None])
    def test_empty_password_switches_to_token_auth(self, password):
        self.datasource.set_password(password)

        assert self.datasource.uses_token_auth() is True
        assert isinstance(self.datasource.auth, DynamicToken)

    def test_every_connection_generates_a_new_token(self):
        self.datasource.set_password("")
        generator = self.datasource.generator

        counts = []
        results = []
        for _ in range(3):
            results.append(self.datasource.credentials_for_next_connection())
            counts.append(generator.count)

        assert counts == [1, 2, 3]
        assert [creds.credential for creds in results] == ["token-1", "token-2", "token-3"]
        assert {creds.identity for creds in results} == {"app_user"}

    def test_static_password_discards_generator(self):
        self.datasource.set_password("")
        generator = self.datasource.generator
        self.datasource.set_password("s3cret")

        self.datasource.credentials_for_next_connection()
        self.datasource.credentials_for_next_connection()

        assert isinstance(self.datasource.auth, StaticPassword)
        assert generator.count == 0

    def test_static_to_dynamic(self):
        self.datasource.set_password("s3cret")
        self.datasource.set_password("")

        assert self.datasource.credentials_for_next_connection().credential == "token-1"

    def test_configure_auth_explicitly(self):
        generator = CountingTokenGenerator()
        datasource = DataSource(URL, username="app_user")
        datasource.configure_auth(DynamicToken(generator=generator))

        assert datasource.credentials_for_next_connection().credential == "token-1"
        assert datasource.credentials_for_next_connection().credential == "token-2"

    def test_base_data_source_rejects_token_auth(self):
        datasource = DataSource(URL, username="app_user")

        with pytest.raises(ConfigurationError):
            datasource.set_password("")

        assert datasource.auth is None


class TestFailures:

    def _datasource(self, generator):
        return DataSource(URL, username="app_user", auth=DynamicToken(generator=generator))

    def test_token_generation_failure_propagates_unchanged(self):
        error = TokenGenerationFailure("signing failed")
        datasource = self._datasource(FailingTokenGenerator(error))

        with pytest.raises(TokenGenerationFailure) as exc_info:
            datasource.credentials_for_next_connection()

        assert exc_info.value is error

    def test_other_errors_are_wrapped(self):
        error = RuntimeError("network unreachable")
        datasource = self._datasource(FailingTokenGenerator(error))

        with pytest.raises(TokenGenerationFailure) as exc_info:
            datasource.credentials_for_next_connection()

        assert exc_info.value.__cause__ is error
        assert "app_user@db.example.com:5432" in str(exc_info.value)

    def test_failure_does_not_fall_back_to_previous_token(self):
        class FlakyGenerator(DbAuthTokenGenerator):
            calls = 0

            def generate_token(self):
                FlakyGenerator.calls += 1
                if FlakyGenerator.calls == 2:
                    raise RuntimeError("expired SSO session")
                return f"token-{FlakyGenerator.calls}"

        datasource = self._datasource(FlakyGenerator())

        assert datasource.credentials_for_next_connection().credential == "token-1"
        with pytest.raises(TokenGenerationFailure):
            datasource.credentials_for_next_connection()
        assert datasource.credentials_for_next_connection().credential == "token-3"

    def test_empty_token_is_a_failure(self):
        class EmptyGenerator(DbAuthTokenGenerator):
            def generate_token(self):
                return ""

        with pytest.raises(TokenGenerationFailure):
            self._datasource(EmptyGenerator()).credentials_for_next_connection()

    def test_unconfigured_auth(self):
        with pytest.raises(ConfigurationError):
            DataSource(URL, username="app_user").credentials_for_next_connection()

    def test_missing_username(self):
        datasource = DataSource(URL, auth=StaticPassword(value="pw"))

        with pytest.raises(ConfigurationError):
            datasource.credentials_for_next_connection()


class TestUrlParts:

    def test_host_port_database(self):
        datasource = DataSource("jdbc:postgresql://db.example.com/app?sslmode=require")

        assert datasource.host == "db.example.com"
        assert datasource.port == 5432
        assert datasource.database == "app"

    def test_invalid_url_is_rejected_at_construction(self):
        with pytest.raises(ConfigurationError):
            DataSource("jdbc:postgresql://")
