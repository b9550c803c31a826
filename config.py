"""Application configuration classes."""

from __future__ import annotations

import os
from collections.abc import Iterable

SUPPORTED_RATE_PROVIDERS = {"static", "ecb"}
PROVIDER_ALIASES = {"mock": "static", "frankfurter": "ecb", "frankfurter_ecb": "ecb"}


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "fx-provider-registry"
    SECRET_KEY = _get_env("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = _get_env("DATABASE_URL", "sqlite:///fx-provider-registry.db")
    RATE_PROVIDER_HOOK = _get_env("RATE_PROVIDER_HOOK", "currencyRates")
    RATE_PROVIDERS: str | tuple[str, ...] = _get_env("RATE_PROVIDERS", "static,ecb")
    AUTO_INSTALL_PROVIDERS: str | tuple[str, ...] = _get_env("AUTO_INSTALL_PROVIDERS", "static")
    REQUEST_TIMEOUT_SECONDS = int(_get_env("REQUEST_TIMEOUT_SECONDS", "5"))
    ECB_API_BASE_URL = _get_env("ECB_API_BASE_URL", "https://api.frankfurter.app")
    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False
    AUTO_INSTALL_PROVIDERS = _get_env("AUTO_INSTALL_PROVIDERS", "")


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If a configured provider name is not supported.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_providers(config_cls)
    return config_cls


def parse_provider_names(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a comma separated (or iterable) provider list into normalized names."""

    if not value:
        return ()
    candidates = value.split(",") if isinstance(value, str) else list(value)
    names: list[str] = []
    for candidate in candidates:
        normalized = _normalize_provider(candidate.strip())
        if normalized and normalized not in names:
            names.append(normalized)
    return tuple(names)


def _validate_providers(config_cls: type[BaseConfig]) -> None:
    enabled = parse_provider_names(config_cls.RATE_PROVIDERS)
    unsupported = [name for name in enabled if name not in SUPPORTED_RATE_PROVIDERS]
    if unsupported:
        raise ValueError(
            f"Unsupported RATE_PROVIDERS {unsupported}. "
            f"Allowed values: {sorted(SUPPORTED_RATE_PROVIDERS)}"
        )
    config_cls.RATE_PROVIDERS = enabled

    auto_install = parse_provider_names(config_cls.AUTO_INSTALL_PROVIDERS)
    missing = [name for name in auto_install if name not in enabled]
    if missing:
        raise ValueError(
            f"AUTO_INSTALL_PROVIDERS {missing} must also be listed in RATE_PROVIDERS."
        )
    config_cls.AUTO_INSTALL_PROVIDERS = auto_install

    if not config_cls.RATE_PROVIDER_HOOK or not config_cls.RATE_PROVIDER_HOOK.strip():
        raise ValueError("RATE_PROVIDER_HOOK cannot be empty.")


def _normalize_provider(value: str | None) -> str:
    if not value:
        return ""
    normalized = value.lower()
    return PROVIDER_ALIASES.get(normalized, normalized)
