"""Provider serving a fixed reference rate table, for development and tests."""

from __future__ import annotations

from collections.abc import Mapping

from fxregistry.utils.datetime import utc_now

from .base import BaseRateProvider, ProviderUnavailable
from .schemas import PairRate, RateTable, normalize_code
from .utils import RebaseError, rebase_rates

# Units of each currency per 1 USD.
DEFAULT_RATES: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 149.5,
    "CHF": 0.88,
    "CAD": 1.36,
}


class StaticRateProvider(BaseRateProvider):
    """Deterministic provider answering from an in-memory table."""

    name = "static"
    display_name = "Static reference rates"

    def __init__(
        self,
        rates: Mapping[str, float] | None = None,
        *,
        name: str | None = None,
        display_name: str | None = None,
        version: str | None = None,
    ) -> None:
        table = DEFAULT_RATES if rates is None else rates
        self._rates = {normalize_code(code): float(value) for code, value in table.items()}
        if name:
            self.name = name
        if display_name:
            self.display_name = display_name
        if version:
            self.version = version

    def supported_currencies(self) -> set[str]:
        return set(self._rates)

    def fetch_rates(self, base: str) -> RateTable:
        base_code = normalize_code(base)
        if base_code not in self._rates:
            raise ProviderUnavailable(
                f"Provider '{self.name}' does not quote {base_code}.", provider=self.name
            )
        try:
            rebased = rebase_rates(self._rates, base_code)
        except RebaseError as exc:
            raise ProviderUnavailable(str(exc), provider=self.name) from exc

        table = RateTable(base_currency=base_code, source=self.name, rates=rebased, timestamp=utc_now())
        if not table.rates:
            raise ProviderUnavailable(
                f"Provider '{self.name}' has no usable rates for {base_code}.", provider=self.name
            )
        return table

    def fetch_pair_rate(self, from_code: str, to_code: str) -> PairRate:
        table = self.fetch_rates(from_code)
        target = normalize_code(to_code)
        rate = table.rate_for(target)
        if rate is None:
            raise ProviderUnavailable(
                f"Provider '{self.name}' cannot price {table.base_currency}->{target}.",
                provider=self.name,
            )
        return PairRate(
            from_currency=table.base_currency,
            to_currency=target,
            source=self.name,
            rate=rate,
            timestamp=table.timestamp,
        )
