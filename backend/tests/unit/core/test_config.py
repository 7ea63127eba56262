"""Tests for environment parsing and config selection."""

from __future__ import annotations

from datetime import timedelta

import pytest

from socialconnect.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_seconds,
    get_config,
)


@pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
def test_env_bool_truthy_values(monkeypatch, raw):
    monkeypatch.setenv("SC_FLAG", raw)
    assert env_bool("SC_FLAG") is True


def test_env_bool_falls_back_to_default_when_unset(monkeypatch):
    monkeypatch.delenv("SC_FLAG", raising=False)
    assert env_bool("SC_FLAG", True) is True
    monkeypatch.setenv("SC_FLAG", "nope")
    assert env_bool("SC_FLAG", True) is False


def test_env_seconds_parses_and_rejects_non_positive(monkeypatch):
    monkeypatch.setenv("SC_TTL", "90")
    assert env_seconds("SC_TTL", 10) == timedelta(seconds=90)
    monkeypatch.setenv("SC_TTL", "")
    assert env_seconds("SC_TTL", 10) == timedelta(seconds=10)
    monkeypatch.setenv("SC_TTL", "0")
    with pytest.raises(ValueError):
        env_seconds("SC_TTL", 10)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("production", ProductionConfig),
        ("Testing", TestingConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config_uses_app_env(monkeypatch, name, expected):
    monkeypatch.setenv("APP_ENV", name)
    assert get_config() is expected


def test_production_refuses_placeholder_secrets(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "SECRET_KEY", "CHANGE_ME")
    monkeypatch.setattr(ProductionConfig, "JWT_SECRET_KEY", "a-real-secret")
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        ProductionConfig.validate()

    monkeypatch.setattr(ProductionConfig, "SECRET_KEY", "another-real-secret")
    ProductionConfig.validate()
