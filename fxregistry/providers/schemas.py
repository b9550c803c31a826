"""Dataclasses describing normalized provider rate results."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Mapping

from fxregistry.utils.datetime import ensure_utc, utc_now


def normalize_code(code: str) -> str:
    """Uppercase and check an ISO 4217 style code; raise ValueError when malformed."""

    if not isinstance(code, str):
        raise ValueError(f"Currency code must be a string: {code!r}")
    normalized = code.strip().upper()
    if len(normalized) != 3 or not normalized.isascii() or not normalized.isalpha():
        raise ValueError(f"Currency code must be three ASCII letters: {code!r}")
    return normalized


def is_usable_rate(value: object) -> bool:
    """True for strictly positive, finite numeric rates."""

    if isinstance(value, bool):
        return False
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number > 0


def _normalize_rates(rates: Mapping[str, float | int | str]) -> Dict[str, float]:
    normalized: Dict[str, float] = {}
    for code, value in rates.items():
        if not is_usable_rate(value):
            continue
        try:
            normalized[normalize_code(code)] = float(value)
        except ValueError:
            continue
    return normalized


@dataclass(frozen=True)
class RateTable:
    """Rates for many currencies relative to one base.

    Entries with a malformed code or a rate that is not strictly positive
    and finite are dropped on construction, so a consumer never sees a
    zero or NaN multiplier.
    """

    base_currency: str
    source: str
    rates: Dict[str, float] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_currency", normalize_code(self.base_currency))
        object.__setattr__(self, "rates", _normalize_rates(self.rates))
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        if not self.source or not self.source.strip():
            raise ValueError("source must be provided for RateTable")

    def rate_for(self, code: str) -> float | None:
        return self.rates.get(normalize_code(code))


@dataclass(frozen=True)
class PairRate:
    """A single conversion multiplier from one currency into another."""

    from_currency: str
    to_currency: str
    source: str
    rate: float
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_currency", normalize_code(self.from_currency))
        object.__setattr__(self, "to_currency", normalize_code(self.to_currency))
        if not is_usable_rate(self.rate):
            raise ValueError(f"rate must be positive and finite, got {self.rate!r}")
        object.__setattr__(self, "rate", float(self.rate))
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        if not self.source or not self.source.strip():
            raise ValueError("source must be provided for PairRate")
