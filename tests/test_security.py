from datetime import timedelta

import jwt
import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.core.security import create_access_token, decode_access_token, get_password_hash, verify_password


def test_password_hash_round_trip():
    hashed = get_password_hash("password123")

    assert hashed.startswith("pbkdf2_sha256$")
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)
    assert get_password_hash("password123") != hashed


def test_malformed_hash_never_verifies():
    assert not verify_password("password123", "plain-text")
    assert not verify_password("password123", None)


def test_access_token_carries_subject():
    token = create_access_token({"sub": "1"})
    payload = decode_access_token(token)

    assert payload["sub"] == "1"
    assert {"exp", "iat", "jti"} <= set(payload)
    assert create_access_token({"sub": "1"}) != token


def test_expired_or_tampered_token_is_rejected():
    expired = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-5))
    forged = jwt.encode({"sub": "1"}, "some-other-signing-key-of-decent-length", algorithm="HS256")

    assert decode_access_token(expired) is None
    assert decode_access_token(forged) is None
    assert decode_access_token("not-a-token") is None


def test_reminder_hour_must_be_a_clock_hour():
    assert Settings(REMINDER_HOUR=0).REMINDER_HOUR == 0
    with pytest.raises(ValidationError):
        Settings(REMINDER_HOUR=24)


def test_cors_origins_accept_json_or_csv():
    assert Settings(CORS_ORIGINS='["http://a.test"]').cors_origins_list == ["http://a.test"]
    assert Settings(CORS_ORIGINS="http://a.test, http://b.test").cors_origins_list == ["http://a.test", "http://b.test"]


def test_secure_store_url_defaults_to_database_url():
    assert Settings(DATABASE_URL="sqlite:///x.db").secure_store_url == "sqlite:///x.db"
    assert Settings(DATABASE_URL="sqlite:///x.db", SECURE_STORE_URL="sqlite:///s.db").secure_store_url == "sqlite:///s.db"
