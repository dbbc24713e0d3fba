from __future__ import annotations

import pytest

from ayni.core import config as core_config
from ayni.core.cors import OriginPolicy


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("APP_ENV", "SECRET_KEY", "DATABASE_URL", "STORAGE_BACKEND", "CORS_ORIGINS", "SESSION_TTL_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    yield monkeypatch
    core_config.get_settings.cache_clear()


def test_defaults_use_json_backend(clean_env):
    settings = core_config.get_settings()

    assert settings.storage_backend == "json"
    assert settings.session_ttl_seconds == 86400
    assert settings.default_payment_method == "whatsapp"
    assert "https://*.vercel.app" in settings.cors_origins


def test_database_url_selects_sql_backend(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite:///tmp.db")

    assert core_config.get_settings().storage_backend == "sql"


def test_explicit_backend_wins(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite:///tmp.db")
    clean_env.setenv("STORAGE_BACKEND", "JSON")

    assert core_config.get_settings().storage_backend == "json"


def test_prod_requires_secret_key(clean_env):
    clean_env.setenv("APP_ENV", "prod")

    with pytest.raises(RuntimeError):
        core_config.get_settings()


def test_settings_are_read_once(clean_env):
    clean_env.setenv("SECRET_KEY", "first")
    first = core_config.get_settings()
    clean_env.setenv("SECRET_KEY", "second")

    assert core_config.get_settings() is first
    assert first.secret_key == "first"


def test_cors_origins_from_env(clean_env):
    clean_env.setenv("CORS_ORIGINS", "https://ayni.pe/, https://*.netlify.app ,")

    assert core_config.get_settings().cors_origins == ("https://ayni.pe", "https://*.netlify.app")


def test_origin_policy_matching():
    policy = OriginPolicy(["https://ayni.pe", "https://*.vercel.app"])

    assert policy.is_allowed("https://ayni.pe")
    assert policy.is_allowed("https://ayni.pe/")
    assert policy.is_allowed("https://a.b.vercel.app")
    assert not policy.is_allowed("https://vercel.app")
    assert not policy.is_allowed("http://ayni.pe")
    assert not policy.is_allowed("https://ayni.pe.evil.com")
