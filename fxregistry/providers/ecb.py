"""European Central Bank reference rates served through the Frankfurter API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fxregistry.utils.datetime import parse_iso_date

from .base import BaseRateProvider, ProviderUnavailable
from .http_client import HTTPClient, HTTPClientConfig, HTTPClientError
from .schemas import PairRate, RateTable, is_usable_rate, normalize_code

logger = logging.getLogger(__name__)

ECB_CURRENCIES: tuple[str, ...] = (
    "AUD", "BGN", "BRL", "CAD", "CHF", "CNY", "CZK", "DKK", "EUR", "GBP", "HKD",
    "HUF", "IDR", "ILS", "INR", "ISK", "JPY", "KRW", "MXN", "MYR", "NOK", "NZD",
    "PHP", "PLN", "RON", "SEK", "SGD", "THB", "TRY", "USD", "ZAR",
)


class EcbRateProvider(BaseRateProvider):
    """Provider that fetches ECB rates via the Frankfurter API."""

    name = "ecb"
    display_name = "European Central Bank (Frankfurter)"

    def __init__(self, client: HTTPClient) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> EcbRateProvider:
        client_config = HTTPClientConfig(
            base_url=str(config.get("ECB_API_BASE_URL", "https://api.frankfurter.app")),
            timeout=float(config.get("REQUEST_TIMEOUT_SECONDS", 5)),
        )
        return cls(HTTPClient(client_config))

    def supported_currencies(self) -> set[str]:
        return set(ECB_CURRENCIES)

    def fetch_rates(self, base: str) -> RateTable:
        base_code = self._ensure_supported(base)
        targets = sorted(set(ECB_CURRENCIES) - {base_code})
        payload = self._get_latest({"from": base_code, "to": ",".join(targets)})

        rates = self._parse_rates(payload)
        rates[base_code] = 1.0
        table = RateTable(
            base_currency=base_code,
            source=self.name,
            rates=rates,
            timestamp=parse_iso_date(payload.get("date")),
        )
        if len(table.rates) < 2:
            raise ProviderUnavailable(
                f"ECB returned no usable rates for base {base_code}.", provider=self.name
            )
        return table

    def fetch_pair_rate(self, from_code: str, to_code: str) -> PairRate:
        source = self._ensure_supported(from_code)
        target = self._ensure_supported(to_code)
        if source == target:
            return PairRate(from_currency=source, to_currency=target, source=self.name, rate=1.0)

        payload = self._get_latest({"from": source, "to": target})
        value = self._parse_rates(payload).get(target)
        if value is None:
            raise ProviderUnavailable(
                f"ECB returned no usable rate for {source}->{target}.", provider=self.name
            )
        return PairRate(
            from_currency=source,
            to_currency=target,
            source=self.name,
            rate=value,
            timestamp=parse_iso_date(payload.get("date")),
        )

    def _get_latest(self, params: Mapping[str, str]) -> dict[str, Any]:
        try:
            return self._client.get("/latest", params=params)
        except HTTPClientError as exc:
            raise ProviderUnavailable(str(exc), provider=self.name) from exc

    def _parse_rates(self, payload: Mapping[str, Any]) -> dict[str, float]:
        raw = payload.get("rates")
        if not isinstance(raw, Mapping):
            raise ProviderUnavailable("ECB response missing 'rates' field", provider=self.name)
        rates: dict[str, float] = {}
        for code, value in raw.items():
            if not is_usable_rate(value):
                continue
            try:
                rates[normalize_code(code)] = float(value)
            except ValueError:
                logger.warning("Skipping unparseable ECB currency code %r", code)
        return rates

    def _ensure_supported(self, code: str) -> str:
        try:
            normalized = normalize_code(code)
        except ValueError as exc:
            raise ProviderUnavailable(str(exc), provider=self.name) from exc
        if normalized not in ECB_CURRENCIES:
            raise ProviderUnavailable(
                f"Currency '{normalized}' is not published by the ECB.", provider=self.name
            )
        return normalized
