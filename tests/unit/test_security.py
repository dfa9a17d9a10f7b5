"""Unit tests for password hashing and session tokens."""

from datetime import timedelta

import pytest

from budgetflow.utils.security import (
    TokenError,
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)


class TestPasswords:
    def test_hash_verifies_and_is_salted(self):
        first = hash_password("Secret123!")
        assert verify_password("Secret123!", first)
        assert not verify_password("secret123!", first)
        assert hash_password("Secret123!") != first

    def test_corrupt_hash_never_matches(self):
        assert verify_password("Secret123!", "not-a-bcrypt-hash") is False

    def test_long_passwords_are_accepted(self):
        password = "x" * 100
        assert verify_password(password, hash_password(password))


class TestTokens:
    def test_claims_survive_the_round_trip(self):
        claims = verify_token(create_access_token({"sub": "7", "role": "admin"}))
        assert claims["sub"] == "7"
        assert claims["role"] == "admin"
        assert claims["exp"] > claims["iat"]

    def test_expired_token_is_refused(self):
        token = create_access_token({"sub": "7"}, expires_in=timedelta(seconds=-5))
        with pytest.raises(TokenError, match="expired"):
            verify_token(token)

    def test_tampered_token_is_refused(self):
        token = create_access_token({"sub": "7"})
        with pytest.raises(ValueError):
            verify_token(token[:-2] + ("AA" if token[-2:] != "AA" else "BB"))

    def test_token_without_subject_is_refused(self):
        with pytest.raises(TokenError, match="subject"):
            verify_token(create_access_token({"role": "admin"}))

    def test_reserved_claims_cannot_be_passed_in(self):
        with pytest.raises(ValueError):
            create_access_token({"sub": "7", "exp": 0})
