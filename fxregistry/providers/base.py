"""Abstract interface for exchange-rate provider modules."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .schemas import PairRate, RateTable, normalize_code

RATE_HOOK = "currencyRates"


class ProviderError(Exception):
    """Raised when a provider cannot be built or fails in an unexpected way."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderUnavailable(ProviderError):
    """A provider declined or failed a rate query; the explicit "no rate" signal."""


class BaseRateProvider(ABC):
    """Capability declaration plus the rate query contract every provider implements.

    Whether a provider is installed or active is tracked by the module
    directory, not here. ``supported_currencies`` is symmetric: any declared
    code may be used as the base of a query.
    """

    name: str
    display_name: str = ""
    version: str = "1.0.0"
    hooks: tuple[str, ...] = (RATE_HOOK,)

    @abstractmethod
    def supported_currencies(self) -> set[str]:
        """Return the uppercase ISO codes this provider can price."""

    @abstractmethod
    def fetch_rates(self, base: str) -> RateTable:
        """Return rates for every supported currency relative to ``base``.

        Raises:
            ProviderUnavailable: If ``base`` is not supported or the upstream
                source cannot be reached.
        """

    @abstractmethod
    def fetch_pair_rate(self, from_code: str, to_code: str) -> PairRate:
        """Return the multiplier converting one unit of ``from_code`` into ``to_code``."""

    def supports(self, *codes: str) -> bool:
        supported = {code.upper() for code in self.supported_currencies()}
        return all(normalize_code(code) in supported for code in codes)

    def label(self) -> str:
        return self.display_name or self.name
