"""
Unit tests for the credential value types.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from cloudctx.core.credentials import Credentials, SessionCredentials, static_supplier


class TestCredentials:

    def test_equal_pairs_compare_equal(self):
        assert Credentials(identity="foo", credential="BAR") == Credentials.of("foo", "BAR")

    def test_credentials_are_immutable(self):
        creds = Credentials(identity="foo", credential="bar")
        with pytest.raises(ValidationError):
            creds.identity = "other"

    @pytest.mark.parametrize("identity", ["", "   ", None])
    def test_identity_is_required(self, identity):
        with pytest.raises(ValidationError):
            Credentials(identity=identity, credential="bar")

    def test_none_credential_becomes_empty_marker(self):
        assert Credentials.of("db_user", None).credential == ""

    def test_repr_hides_secret(self):
        creds = Credentials(identity="foo", credential="super-secret-value")
        assert "super-secret-value" not in repr(creds)
        assert "foo" in repr(creds)


class TestSessionCredentials:

    def test_epoch_expiration_is_converted_to_utc_datetime(self):
        creds = SessionCredentials(
            identity="azure-token", credential="tok", session_token="tok", expiration=1_700_000_000
        )
        assert creds.expiration == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)

    def test_unknown_expiration_is_never_expired(self):
        creds = SessionCredentials(identity="AKIA", credential="secret", session_token="token")
        assert creds.expiration is None
        assert creds.is_expired() is False

    def test_is_expired(self):
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        creds = SessionCredentials(
            identity="AKIA", credential="secret", session_token="token", expiration=now - timedelta(seconds=1)
        )
        assert creds.is_expired(now) is True
        assert creds.is_expired(now - timedelta(minutes=5)) is False

    def test_session_credentials_are_credentials(self):
        creds = SessionCredentials(identity="AKIA", credential="secret", session_token="sess-xyz")
        assert isinstance(creds, Credentials)
        assert "sess-xyz" not in repr(creds)


class TestStaticSupplier:

    def test_returns_the_same_credentials_every_call(self):
        creds = Credentials.of("foo", "bar")
        supplier = static_supplier(creds)
        assert supplier() is creds
        assert supplier() is creds
