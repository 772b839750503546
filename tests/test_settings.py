from datetime import timedelta

import pytest
from pydantic import ValidationError

from app.brandlog.core.config import DEFAULT_SECRET_KEY, Settings
from app.brandlog.core.security import ACCESS_TOKEN_LIFETIME


def test_defaults(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)

    settings = Settings(_env_file=None)

    assert settings.ALGORITHM == "HS256"
    assert settings.SECRET_KEY == DEFAULT_SECRET_KEY


@pytest.mark.parametrize("secret", ["", DEFAULT_SECRET_KEY])
def test_production_refuses_default_secret(monkeypatch, secret):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("SECRET_KEY", secret)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_production_accepts_configured_secret(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("SECRET_KEY", "a-real-secret")

    assert Settings(_env_file=None).SECRET_KEY == "a-real-secret"


def test_token_lifetime_ignores_environment(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "5")

    settings = Settings(_env_file=None)

    assert not hasattr(settings, "ACCESS_TOKEN_EXPIRE_MINUTES")
    assert ACCESS_TOKEN_LIFETIME == timedelta(hours=24)
