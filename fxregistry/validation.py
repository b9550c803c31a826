"""Validation helpers for currency codes supplied by callers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from fxregistry.errors import InvalidCodeError
from fxregistry.providers.schemas import normalize_code


def _preview_codes(codes: Sequence[str], max_items: int = 10) -> str:
    subset = list(sorted(codes))[:max_items]
    preview = ", ".join(subset)
    if len(codes) > max_items:
        preview += ", ..."
    return preview


def normalize_currency_code(value: str | None, *, field: str = "currency_code") -> str:
    """Uppercase a code and reject anything that is not three ASCII letters."""

    if value is None or not str(value).strip():
        raise InvalidCodeError(f"'{field}' is required.", payload={"field": field})

    try:
        return normalize_code(str(value))
    except ValueError as exc:
        normalized = str(value).strip().upper()
        raise InvalidCodeError(
            f"Unsupported currency code '{normalized}'. Please use a valid ISO 4217 code.",
            payload={"field": field, "code": normalized},
        ) from exc


def validate_currency_code(value: str | None, *, field: str = "currency_code") -> str:
    """Ensure the provided code is well formed and exists in the currency directory."""

    from fxregistry.services.currency_directory import directory

    normalized = normalize_currency_code(value, field=field)
    if not directory.is_allowed(normalized):
        codes: Iterable[str] = directory.codes
        hint = _preview_codes(tuple(codes)) if codes else "no codes configured"
        raise InvalidCodeError(
            f"Unsupported currency code '{normalized}'. Allowed codes: {hint}.",
            payload={"field": field, "code": normalized},
        )

    return normalized
