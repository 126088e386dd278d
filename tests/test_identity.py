"""Tests for bearer token issuing and resolution."""

from datetime import timedelta

import jwt
import pytest

from job_board.core.identity import TokenIdentityProvider
from job_board.core.models import Role

SECRET = "unit-test-secret-with-enough-bytes-for-hs256"


@pytest.fixture
def identity():
    return TokenIdentityProvider(SECRET)


class TestTokens:
    def test_round_trip(self, identity):
        token = identity.issue_token("a3f1c2d4-0000-4000-8000-000000000001")
        assert identity.verify_token(token) == "a3f1c2d4-0000-4000-8000-000000000001"

    def test_token_carries_expiry(self, identity):
        claims = jwt.decode(identity.issue_token("user-1"), SECRET, algorithms=["HS256"])

        assert claims["sub"] == "user-1"
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_expired_token(self, identity):
        token = identity.issue_token("user-1", expires_in=timedelta(seconds=-10))
        assert identity.verify_token(token) is None

    def test_tampered_payload(self, identity):
        header, _, signature = identity.issue_token("user-1").split(".")
        _, payload, _ = identity.issue_token("user-2").split(".")

        assert identity.verify_token(f"{header}.{payload}.{signature}") is None

    def test_other_key_rejected(self, identity):
        token = TokenIdentityProvider("someone-else-entirely-with-a-long-key").issue_token("user-1")
        assert identity.verify_token(token) is None

    def test_unsigned_token_rejected(self, identity):
        token = jwt.encode({"sub": "user-1", "exp": 9999999999}, None, algorithm="none")
        assert identity.verify_token(token) is None

    def test_token_without_expiry_rejected(self, identity):
        token = jwt.encode({"sub": "user-1"}, SECRET, algorithm="HS256")
        assert identity.verify_token(token) is None

    @pytest.mark.parametrize("token", ["", "no-dot", ".abc", "abc.", "a.b.c", "abc.éé", "é.é.é"])
    def test_malformed(self, identity, token):
        assert identity.verify_token(token) is None

    def test_empty_secret(self):
        with pytest.raises(ValueError):
            TokenIdentityProvider("")


class TestResolve:
    def test_resolves_stored_role(self, identity, session, admin):
        principal = identity.resolve(session, identity.issue_token(admin.user_id))

        assert principal == admin
        assert principal.role == Role.ADMIN
        assert principal.is_admin and not principal.is_user

    def test_unknown_user(self, identity, session):
        assert identity.resolve(session, identity.issue_token("nobody")) is None

    def test_missing_token(self, identity, session):
        assert identity.resolve(session, None) is None

    def test_non_ascii_token(self, identity, session):
        assert identity.resolve(session, "abc.éé") is None
