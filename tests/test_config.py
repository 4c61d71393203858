"""Tests for the environment driven settings."""

import pytest
from pydantic import ValidationError

from notifyhub.config import Settings, get_settings, reset_settings_cache
from notifyhub.infrastructure.security import (
    create_access_token,
    decode_access_token,
    recipient_from_token,
)


def _settings(**values) -> Settings:
    return Settings(database_url="sqlite://", secret_key="secret", **values)


def test_defaults() -> None:
    settings = _settings()

    assert settings.jwt_algorithm == "HS256"
    assert settings.app_timezone == "UTC"
    assert settings.push_gateway_timeout == 5.0
    assert settings.sendgrid_api_key is None


def test_sendgrid_settings_must_be_paired() -> None:
    with pytest.raises(ValidationError):
        _settings(sendgrid_api_key="SG.fake")

    with pytest.raises(ValidationError):
        _settings(sendgrid_api_key="SG.fake", sendgrid_sender="not-an-address")

    settings = _settings(sendgrid_api_key="SG.fake", sendgrid_sender="noreply@example.com")
    assert settings.sendgrid_sender == "noreply@example.com"


def test_cors_origins_accept_comma_separated_values() -> None:
    settings = _settings(cors_origins="https://app.example.com, http://localhost:3000,")

    assert settings.allowed_origins == ["https://app.example.com", "http://localhost:3000"]


def test_log_level_is_normalized() -> None:
    assert _settings(log_level=" debug ").log_level == "DEBUG"

    with pytest.raises(ValidationError):
        _settings(log_level="verbose")


def test_push_gateway_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        _settings(push_gateway_timeout=0)


def test_settings_are_cached_until_reset(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    reset_settings_cache()

    assert get_settings() is not first
    assert get_settings().log_level == "DEBUG"


def test_token_round_trip_carries_contact_claims() -> None:
    token = create_access_token("user-1", email="ada@example.com", name="Ada")

    recipient = recipient_from_token(token)

    assert recipient.id == "user-1"
    assert recipient.email == "ada@example.com"
    assert recipient.name == "Ada"


def test_token_signed_with_another_secret_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    token = create_access_token("user-1")
    monkeypatch.setenv("SECRET_KEY", "rotated")
    reset_settings_cache()

    with pytest.raises(ValueError):
        decode_access_token(token)


def test_token_without_subject_is_rejected() -> None:
    token = create_access_token("   ")

    with pytest.raises(ValueError):
        recipient_from_token(token)
