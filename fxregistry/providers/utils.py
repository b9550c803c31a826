"""Helper utilities for provider rate transformations."""

from __future__ import annotations

from typing import Dict, Mapping


class RebaseError(ValueError):
    """Raised when rebasing rates fails due to missing data."""


def rebase_rates(rates: Mapping[str, float], new_base: str) -> Dict[str, float]:
    """Re-express rates quoted against one base so they are quoted against ``new_base``.

    Args:
        rates: Mapping of currency codes to multipliers relative to some
            reference currency. Must contain ``new_base``.
        new_base: ISO code to rebase to.

    Returns:
        A dictionary of rebased rates including ``new_base`` with value 1.

    Raises:
        RebaseError: If the requested base is missing or not positive.
    """

    normalized_rates = {code.upper(): float(rate) for code, rate in rates.items()}
    normalized_new_base = new_base.strip().upper()

    if normalized_new_base not in normalized_rates:
        raise RebaseError(f"Missing rate for {normalized_new_base} when rebasing.")

    base_rate = normalized_rates[normalized_new_base]
    if base_rate <= 0:
        raise RebaseError(f"Cannot rebase using {normalized_new_base} with rate {base_rate}.")

    return {code: value / base_rate for code, value in normalized_rates.items()}
