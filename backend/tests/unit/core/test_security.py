"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens
"""
import pytest
from datetime import timedelta
from jose import jwt
from fastapi import HTTPException

from seminar.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    decode_token,
)
from seminar.core.config import settings


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        """Bcrypt salts every hash"""
        assert get_password_hash("samepassword") != get_password_hash("samepassword")

    def test_verify_password_correct(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("wrongpassword", hashed) is False

    def test_verify_password_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_long_password_truncated_consistently(self):
        """Only the first 72 bytes take part in bcrypt"""
        long_password = "a" * 100
        hashed = get_password_hash(long_password)

        assert verify_password("a" * 72, hashed) is True


class TestAccessTokens:
    """Test JWT creation and decoding"""

    def test_create_and_decode(self):
        token = create_access_token({"sub": "admin-id", "username": "admin"})
        payload = decode_token(token)

        assert payload["sub"] == "admin-id"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_custom_expiry(self):
        token = create_access_token({"sub": "admin-id"}, expires_delta=timedelta(minutes=5))
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        assert payload["sub"] == "admin-id"

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "admin-id"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode({"sub": "admin-id", "type": "access"}, "some-other-key", algorithm="HS256")

        with pytest.raises(HTTPException):
            decode_token(token)
