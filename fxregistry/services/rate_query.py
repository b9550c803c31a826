"""Rate queries routed to the provider module assigned to each currency."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import TypeVar

from fxregistry.errors import NoProviderAvailableError, UnknownModuleError
from fxregistry.logging import provider_log_extra
from fxregistry.providers.base import ProviderUnavailable
from fxregistry.providers.schemas import PairRate, RateTable
from fxregistry.validation import normalize_currency_code

from .currency_directory import CurrencyDirectory
from .module_directory import ModuleDirectory, ModuleRef
from .resolution import ProviderResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RefreshStatus(str, Enum):
    UPDATED = "updated"
    NO_PROVIDER = "no_provider"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class RefreshOutcome:
    code: str
    status: RefreshStatus
    provider: str | None = None
    rate: float | None = None
    error: str | None = None


class RateQueryService:
    """Invoke providers on behalf of callers, one attempt per call.

    ``ProviderUnavailable`` from a provider is logged and re-raised as is;
    no retry or fallback to another provider happens here.
    """

    def __init__(
        self,
        resolver: ProviderResolver,
        modules: ModuleDirectory,
        currencies: CurrencyDirectory,
    ) -> None:
        self._resolver = resolver
        self._modules = modules
        self._currencies = currencies

    def fetch_rates(self, module_name: str, base_code: str | None = None) -> RateTable:
        """Fetch the full rate table of one installed module."""

        module = self._require_module(module_name)
        base = self._resolver.resolve_base(base_code)
        table = self._call(module, base, None, lambda: module.provider.fetch_rates(base))
        if not table.rates:
            raise ProviderUnavailable(
                f"Provider '{module.name}' returned no usable rates for {base}.",
                provider=module.name,
            )
        return table

    def fetch_pair_rate(self, module_name: str, from_code: str, to_code: str) -> PairRate:
        """Fetch one pair from a named installed module."""

        module = self._require_module(module_name)
        source = normalize_currency_code(from_code, field="from")
        target = normalize_currency_code(to_code, field="to")
        return self._call(module, source, target, lambda: module.provider.fetch_pair_rate(source, target))

    def fetch_rate_for(self, currency_code: str, base_code: str | None = None) -> PairRate:
        """Rate from ``base_code`` (default currency when omitted) into ``currency_code``.

        Uses the assigned provider, assigning one on the fly when the
        currency has none or its module went stale.
        """

        base = self._resolver.resolve_base(base_code)
        module = self._resolver.provider_for(currency_code, base)
        target = normalize_currency_code(currency_code, field="code")
        if module is None:
            raise NoProviderAvailableError(
                f"No installed provider can price {base}->{target}.",
                payload={"code": target, "base": base},
            )
        return self._call(module, base, target, lambda: module.provider.fetch_pair_rate(base, target))

    def refresh_currency_rates(self) -> dict[str, RefreshOutcome]:
        """Refresh the stored conversion rate of every non-default currency.

        Each provider is asked once for its full table against the default
        currency. One provider failing only marks its own currencies.
        """

        base = self._resolver.default_currency().code
        outcomes: dict[str, RefreshOutcome] = {}
        grouped: dict[str, tuple[ModuleRef, list]] = {}

        for currency in self._currencies.list_active():
            if currency.code == base:
                continue
            module = self._resolver.provider_for(currency.code, base)
            if module is None:
                outcomes[currency.code] = RefreshOutcome(currency.code, RefreshStatus.NO_PROVIDER)
                continue
            grouped.setdefault(module.name, (module, []))[1].append(currency)

        for module, currencies in grouped.values():
            try:
                table = self.fetch_rates(module.name, base)
            except ProviderUnavailable as exc:
                for currency in currencies:
                    outcomes[currency.code] = RefreshOutcome(
                        currency.code, RefreshStatus.UNAVAILABLE, provider=module.name, error=str(exc)
                    )
                continue

            for currency in currencies:
                rate = table.rates.get(currency.code)
                if rate is None:
                    outcomes[currency.code] = RefreshOutcome(
                        currency.code, RefreshStatus.UNAVAILABLE, provider=module.name
                    )
                    continue
                self._currencies.record_rate(currency.id, rate, table.timestamp)
                outcomes[currency.code] = RefreshOutcome(
                    currency.code, RefreshStatus.UPDATED, provider=module.name, rate=rate
                )

        updated = sum(1 for outcome in outcomes.values() if outcome.status is RefreshStatus.UPDATED)
        logger.info("Refreshed %s of %s currency rates against %s", updated, len(outcomes), base)
        return outcomes

    def _require_module(self, module_name: str) -> ModuleRef:
        module = self._modules.get_by_name(module_name)
        if not self._modules.is_valid(module):
            raise UnknownModuleError(
                f"Module '{module_name}' is not an installed rate provider.",
                payload={"module": module_name},
            )
        return module

    def _call(self, module: ModuleRef, base: str, target: str | None, fetch: Callable[[], T]) -> T:
        start = perf_counter()
        try:
            result = fetch()
        except ProviderUnavailable as exc:
            duration = (perf_counter() - start) * 1000
            logger.warning(
                "Provider %s unavailable: %s",
                module.name,
                exc,
                extra=provider_log_extra(
                    provider=module.name,
                    base=base,
                    target=target,
                    event="provider.fetch",
                    status="unavailable",
                    duration_ms=duration,
                    error=str(exc),
                ),
            )
            if exc.provider is None:
                exc.provider = module.name
            raise

        duration = (perf_counter() - start) * 1000
        logger.info(
            "Provider fetch succeeded",
            extra=provider_log_extra(
                provider=module.name,
                base=base,
                target=target,
                event="provider.fetch",
                status="success",
                duration_ms=duration,
            ),
        )
        return result
