from datetime import timedelta

import pytest

from studiobook.api.security import JWTError, create_access_token, decode_access_token
from studiobook.core.config import Settings
from studiobook.models import UserRole


def test_cors_origins_comma_separated(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    assert Settings().CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_cors_origins_json_list(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["http://c.test"]')
    assert Settings().CORS_ORIGINS == ["http://c.test"]


def test_back_to_back_flag_from_env(monkeypatch):
    monkeypatch.setenv("BOOKING_ALLOW_BACK_TO_BACK", "true")
    assert Settings().BOOKING_ALLOW_BACK_TO_BACK is True


def test_token_round_trip():
    claims = decode_access_token(create_access_token(7, UserRole.STAFF))
    assert claims["sub"] == "7"
    assert claims["role"] == "staff"


def test_expired_token_rejected():
    token = create_access_token(7, expires_delta=timedelta(seconds=-5))
    with pytest.raises(JWTError):
        decode_access_token(token)
