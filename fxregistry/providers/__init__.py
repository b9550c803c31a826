"""Provider interfaces and data structures for exchange-rate sources."""

from .base import RATE_HOOK, BaseRateProvider, ProviderError, ProviderUnavailable
from .ecb import EcbRateProvider
from .schemas import PairRate, RateTable, is_usable_rate, normalize_code
from .static import StaticRateProvider

__all__ = [
    "RATE_HOOK",
    "BaseRateProvider",
    "EcbRateProvider",
    "PairRate",
    "ProviderError",
    "ProviderUnavailable",
    "RateTable",
    "StaticRateProvider",
    "is_usable_rate",
    "normalize_code",
]
