"""Unit tests for password hashing and access tokens."""

from datetime import timedelta
from uuid import uuid4

from spraydesk.core import security


def test_password_hash_roundtrip():
    hashed = security.get_password_hash("SprayBooth123!")
    assert hashed != "SprayBooth123!"
    assert security.verify_password("SprayBooth123!", hashed)
    assert not security.verify_password("wrong", hashed)


def test_long_password_is_truncated_consistently():
    password = "é" * 60  # 120 bytes in UTF-8
    hashed = security.get_password_hash(password)
    assert security.verify_password(password, hashed)
    assert len(security._password_bytes(password)) <= 72


def test_access_token_carries_session_version():
    user_id = str(uuid4())
    token = security.create_access_token(user_id, session_version=3)
    payload = security.decode_token(token)

    assert payload["sub"] == user_id
    assert payload["ver"] == 3
    assert payload["type"] == security.ACCESS_TOKEN_TYPE


def test_expired_or_tampered_token_decodes_to_none():
    expired = security.create_access_token(str(uuid4()), 0, expires_delta=timedelta(seconds=-5))
    assert security.decode_token(expired) is None
    assert security.decode_token("not-a-token") is None
