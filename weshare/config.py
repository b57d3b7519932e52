from __future__ import annotations

from dataclasses import dataclass, field
import os

from dotenv import find_dotenv, load_dotenv


def _load_env() -> None:
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path, override=False)


_load_env()


def _get_env(key: str, default: str | None = None) -> str | None:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


def _get_bool(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_list(key: str, default: list[str] | None = None) -> list[str]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    store_backend: str = field(default_factory=lambda: (_get_env("STORE_BACKEND", "sql") or "sql").lower())
    database_url: str = field(default_factory=lambda: _get_env("DATABASE_URL", "sqlite:///./weshare.db"))

    supabase_url: str | None = field(default_factory=lambda: _get_env("SUPABASE_URL"))
    supabase_anon_key: str | None = field(
        default_factory=lambda: _get_env("SUPABASE_ANON_KEY") or _get_env("SUPABASE_KEY")
    )

    public_base_url: str = field(default_factory=lambda: _get_env("PUBLIC_BASE_URL", "weshare.site"))
    default_language: str = field(default_factory=lambda: _get_env("DEFAULT_LANGUAGE", "en"))
    rollback_on_failure: bool = field(default_factory=lambda: _get_bool("ROLLBACK_ON_FAILURE", False))

    log_level: str = field(default_factory=lambda: (_get_env("LOG_LEVEL", "INFO") or "INFO").upper())
    log_dir: str | None = field(default_factory=lambda: _get_env("LOG_DIR"))

    cors_allow_origins: list[str] = field(default_factory=lambda: _get_list("CORS_ALLOW_ORIGINS", ["*"]))
    cors_allow_credentials: bool = field(default_factory=lambda: _get_bool("CORS_ALLOW_CREDENTIALS", False))
    cors_allow_methods: list[str] = field(default_factory=lambda: _get_list("CORS_ALLOW_METHODS", ["*"]))
    cors_allow_headers: list[str] = field(default_factory=lambda: _get_list("CORS_ALLOW_HEADERS", ["*"]))


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def refresh_settings() -> Settings:
    """Rebuild settings from environment variables."""
    global _settings
    _settings = Settings()
    return _settings


__all__ = [
    "Settings",
    "get_settings",
    "refresh_settings",
]
