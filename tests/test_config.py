import pytest

from weshare.config import get_settings, refresh_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    yield
    monkeypatch.undo()
    refresh_settings()


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("STORE_BACKEND", "Supabase")
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.setenv("SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("ROLLBACK_ON_FAILURE", "yes")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")

    settings = refresh_settings()

    assert settings.store_backend == "supabase"
    assert settings.supabase_anon_key == "anon-key"
    assert settings.rollback_on_failure is True
    assert settings.cors_allow_origins == ["https://a.example", "https://b.example"]
    assert get_settings() is settings


def test_settings_defaults(monkeypatch) -> None:
    for key in ("STORE_BACKEND", "DATABASE_URL", "PUBLIC_BASE_URL", "DEFAULT_LANGUAGE", "ROLLBACK_ON_FAILURE"):
        monkeypatch.delenv(key, raising=False)

    settings = refresh_settings()

    assert settings.store_backend == "sql"
    assert settings.database_url.startswith("sqlite:///")
    assert settings.public_base_url == "weshare.site"
    assert settings.default_language == "en"
    assert settings.rollback_on_failure is False
