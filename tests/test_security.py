"""Password hashing and token signing."""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from app.core.security import PasswordHasher, TokenService, TokenVerificationError
from tests.fakes import TEST_PASSWORD


class TestPasswordHasher:
    def test_hash_is_salted(self, hasher):
        assert hasher.hash(TEST_PASSWORD) != hasher.hash(TEST_PASSWORD)

    def test_compare(self, password_hash, hasher):
        assert hasher.compare(TEST_PASSWORD, password_hash)
        assert not hasher.compare("wrong-password", password_hash)

    def test_compare_with_non_bcrypt_hash_is_false(self, hasher):
        assert hasher.compare(TEST_PASSWORD, "plaintext") is False

    def test_rounds_are_encoded_in_hash(self):
        assert PasswordHasher(rounds=5).hash("x").startswith("$2b$05$")


class TestTokenService:
    def test_sign_then_verify_returns_subject(self, token_service):
        user_id = uuid.uuid4()
        assert token_service.verify(token_service.sign(user_id)) == str(user_id)

    def test_claims(self, token_service):
        token = token_service.sign("abc")
        claims = jwt.get_unverified_claims(token)

        assert claims["sub"] == "abc"
        assert claims["type"] == "access"
        assert claims["exp"] - claims["iat"] == 5 * 60

    def test_expired(self, token_service):
        token = token_service.sign("abc", expires_delta=timedelta(minutes=-1))
        with pytest.raises(TokenVerificationError):
            token_service.verify(token)

    def test_wrong_key(self, token_service):
        token = TokenService(secret_key="other").sign("abc")
        with pytest.raises(TokenVerificationError):
            token_service.verify(token)

    def test_missing_subject(self, token_service):
        token = jwt.encode({"type": "access"}, "test-secret", algorithm="HS256")
        with pytest.raises(TokenVerificationError):
            token_service.verify(token)
