"""Registry and factory for rate provider implementations.

The registry only knows which provider implementations exist. Whether a
provider is installed or active is tracked by the module directory.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from config import parse_provider_names

from .base import BaseRateProvider, ProviderError

ProviderFactory = Callable[[], BaseRateProvider]

_PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {}


def _default_factories() -> Iterable[tuple[str, ProviderFactory]]:
    from flask import current_app

    from .ecb import EcbRateProvider
    from .static import StaticRateProvider

    def ecb_factory() -> EcbRateProvider:
        return EcbRateProvider.from_config(current_app.config)

    return [
        (StaticRateProvider.name, StaticRateProvider),
        (EcbRateProvider.name, ecb_factory),
    ]


def register_provider(name: str, factory: ProviderFactory) -> None:
    """Register a provider factory under the given name."""

    if not name or not name.strip():
        raise ValueError("Provider name cannot be empty.")
    _PROVIDER_FACTORIES[name.strip().lower()] = factory


def unregister_provider(name: str) -> None:
    """Remove a provider factory; primarily for testing."""

    _PROVIDER_FACTORIES.pop(name.lower(), None)


def list_providers() -> List[str]:
    """Return the list of registered provider identifiers."""

    return sorted(_PROVIDER_FACTORIES.keys())


def is_registered(name: str) -> bool:
    return bool(name) and name.lower() in _PROVIDER_FACTORIES


def get_provider(name: str) -> BaseRateProvider:
    """Instantiate the provider registered under ``name``."""

    provider_name = (name or "").lower()
    try:
        factory = _PROVIDER_FACTORIES[provider_name]
    except KeyError as exc:
        available = ", ".join(list_providers()) or "none registered"
        raise ProviderError(
            f"Unknown provider '{provider_name}'. Available providers: {available}",
            provider=provider_name,
        ) from exc
    provider = factory()
    if provider.name.lower() != provider_name:
        raise ProviderError(
            f"Factory for '{provider_name}' built provider named '{provider.name}'.",
            provider=provider_name,
        )
    return provider


def init_providers(app) -> List[str]:
    """Register the built-in providers enabled by RATE_PROVIDERS."""

    enabled = parse_provider_names(app.config.get("RATE_PROVIDERS"))
    reset_registry(enabled=enabled)
    app.extensions["rate_provider_names"] = list_providers()
    return list_providers()


def reset_registry(
    default_factories: Iterable[tuple[str, ProviderFactory]] | None = None,
    *,
    enabled: Iterable[str] | None = None,
) -> None:
    """Reset provider registry; useful for tests."""

    _PROVIDER_FACTORIES.clear()

    allowed = set(enabled) if enabled is not None else None
    factories = default_factories if default_factories is not None else _default_factories()
    for name, factory in factories:
        if allowed is None or name in allowed:
            register_provider(name, factory)


reset_registry()
