"""Helper factories for building provider modules in tests."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from fxregistry.providers.base import BaseRateProvider, ProviderError, ProviderUnavailable
from fxregistry.providers.registry import register_provider
from fxregistry.providers.schemas import PairRate, RateTable
from fxregistry.providers.static import StaticRateProvider


def make_static_provider(
    name: str,
    codes: Iterable[str] = ("USD", "EUR"),
    *,
    rates: Mapping[str, float] | None = None,
    version: str | None = None,
) -> StaticRateProvider:
    """Return a static provider quoting ``codes`` (1.0, 1.1, 1.2, ... per USD)."""

    table = dict(rates) if rates is not None else {
        code: round(1.0 + index * 0.1, 4) for index, code in enumerate(codes)
    }
    return StaticRateProvider(table, name=name, display_name=name.title(), version=version)


def register_static(name: str, codes: Iterable[str] = ("USD", "EUR"), **kwargs) -> StaticRateProvider:
    """Register a static provider factory under ``name`` and return the instance."""

    provider = make_static_provider(name, codes, **kwargs)
    register_provider(name, lambda: provider)
    return provider


class FailingProvider(BaseRateProvider):
    """Declares currencies but answers every query as unavailable."""

    def __init__(self, name: str, codes: Iterable[str]) -> None:
        self.name = name
        self.display_name = name.title()
        self._codes = {code.upper() for code in codes}
        self.calls: list[tuple[str, ...]] = []

    def supported_currencies(self) -> set[str]:
        return set(self._codes)

    def fetch_rates(self, base: str) -> RateTable:
        self.calls.append((base,))
        raise ProviderUnavailable(f"{self.name} is down", provider=self.name)

    def fetch_pair_rate(self, from_code: str, to_code: str) -> PairRate:
        self.calls.append((from_code, to_code))
        raise ProviderUnavailable(f"{self.name} is down")


class ExplodingCapabilityProvider(FailingProvider):
    """Fails while reporting its capabilities."""

    def supported_currencies(self) -> set[str]:
        raise ProviderError("capability manifest unreadable", provider=self.name)


class OtherHookModule(StaticRateProvider):
    """A module installed on an unrelated hook only."""

    hooks = ("displayHeader",)


def register_instance(provider: BaseRateProvider) -> BaseRateProvider:
    register_provider(provider.name, lambda: provider)
    return provider
