"""Resolution engine deciding which provider module serves each currency."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fxregistry.errors import InvalidCodeError, NoDefaultCurrencyError, UnknownModuleError
from fxregistry.logging import assignment_log_extra
from fxregistry.providers.base import ProviderError
from fxregistry.validation import normalize_currency_code

from .assignment_store import AssignmentStore
from .currency_directory import CurrencyDirectory, CurrencyRecord
from .module_directory import ModuleDirectory, ModuleRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceOption:
    """A provider that can serve a currency, as offered to an administrator."""

    id: int
    name: str
    display_name: str
    selected: bool


class ProviderResolver:
    """Reconcile assignments and discover providers for currencies.

    Assignment state per currency moves Unassigned -> Assigned(module) ->
    Stale(module gone) -> Unassigned or Assigned(other module). Only
    ``scan_missing_assignments``, ``provider_for`` and ``set_module`` write.
    """

    def __init__(
        self,
        currencies: CurrencyDirectory,
        modules: ModuleDirectory,
        assignments: AssignmentStore,
    ) -> None:
        self._currencies = currencies
        self._modules = modules
        self._assignments = assignments

    def default_currency(self) -> CurrencyRecord:
        default = self._currencies.get_default_currency()
        if default is None:
            raise NoDefaultCurrencyError()
        return default

    def resolve_base(self, base_code: str | None = None) -> str:
        if base_code:
            return normalize_currency_code(base_code, field="base")
        return self.default_currency().code

    def find_providers(
        self,
        to_code: str,
        from_code: str | None = None,
        just_one: bool = False,
    ) -> list[ModuleRef] | ModuleRef | None:
        """Installed rate modules able to price both ``to_code`` and ``from_code``.

        Matches keep the module directory's listing order. With ``just_one``
        the first match (or None) is returned; otherwise a possibly empty list.
        """

        target = normalize_currency_code(to_code, field="to")
        source = self.resolve_base(from_code)

        matches: list[ModuleRef] = []
        for module in self._modules.list_active_providers_for_hook():
            if not module.is_loaded:
                continue
            supported = module.supported_currencies()
            if target in supported and source in supported:
                if just_one:
                    return module
                matches.append(module)

        return None if just_one else matches

    def scan_missing_assignments(self, base_code: str | None = None) -> dict[str, ModuleRef | None]:
        """Fill unassigned or stale assignments from the installed providers.

        Returns every active currency code mapped to its module (None when no
        provider could be found).
        """

        base = self.resolve_base(base_code)
        table: dict[str, ModuleRef | None] = {}

        for currency_id, module_id in self._assignments.list_all().items():
            currency = self._currencies.get_by_id(currency_id)
            if currency is None or not currency.active:
                continue

            current = self._modules.get_by_id(module_id)
            if self._modules.is_valid(current):
                table[currency.code] = current
                continue

            try:
                candidate = self.find_providers(currency.code, base, just_one=True)
            except ProviderError as exc:
                logger.warning(
                    "Provider lookup for %s failed: %s",
                    currency.code,
                    exc,
                    extra=assignment_log_extra(
                        currency=currency.code, event="assignment.scan_failed", provider=None, base=base
                    ),
                )
                candidate = None

            if candidate is not None:
                self._assignments.upsert(currency.id, candidate.id)
                logger.info(
                    "Assigned %s to %s",
                    currency.code,
                    candidate.name,
                    extra=assignment_log_extra(
                        currency=currency.code,
                        event="assignment.scan",
                        provider=candidate.name,
                        previous=current.name if current else None,
                        base=base,
                    ),
                )
            table[currency.code] = candidate

        return table

    def provider_for(
        self,
        currency_code: str,
        base_code: str | None = None,
        *,
        persist: bool = True,
    ) -> ModuleRef | None:
        """The valid module assigned to a currency, discovering one when missing.

        When the assigned module cannot quote ``base_code`` another provider is
        returned for this call only; the stored assignment is left alone.
        """

        code = normalize_currency_code(currency_code)
        currency = self._currencies.get_record_by_code(code)
        if currency is None:
            raise InvalidCodeError(
                f"Unknown currency code '{code}'.", payload={"field": "code", "code": code}
            )

        base = self.resolve_base(base_code)
        current = self._modules.get_by_id(self._assignments.get(currency.id))
        assigned = self._modules.is_valid(current)
        if assigned and base in current.supported_currencies():
            return current

        candidate = self.find_providers(code, base, just_one=True)
        # A valid assignment only changes through scans of stale rows or set_module.
        if candidate is not None and persist and not assigned:
            self._assignments.upsert(currency.id, candidate.id)
            logger.info(
                "Lazily assigned %s to %s",
                code,
                candidate.name,
                extra=assignment_log_extra(
                    currency=code,
                    event="assignment.lazy",
                    provider=candidate.name,
                    previous=current.name if current else None,
                    base=base,
                ),
            )
        return candidate

    def get_service_options_for(
        self, currency_id: int, selected_name: str | None = None
    ) -> list[ServiceOption] | None:
        """Providers an administrator may choose for a currency.

        Returns None when the currency is the default currency, since there
        is nothing to convert.
        """

        currency = self._currencies.get_by_id(currency_id)
        if currency is None:
            raise InvalidCodeError(
                f"Unknown currency id {currency_id}.", payload={"field": "currency_id"}
            )

        default = self.default_currency()
        if currency.code == default.code:
            return None

        modules = self.find_providers(currency.code, default.code, just_one=False)
        return [
            ServiceOption(
                id=module.id,
                name=module.name,
                display_name=module.display_name,
                selected=module.name == selected_name,
            )
            for module in modules
        ]

    def set_module(self, currency_id: int, module_id: int) -> ModuleRef:
        """Explicitly assign a module to a currency, replacing any previous choice."""

        currency = self._currencies.get_by_id(currency_id)
        if currency is None:
            raise InvalidCodeError(
                f"Unknown currency id {currency_id}.", payload={"field": "currency_id"}
            )
        module = self._modules.get_by_id(module_id)
        if module is None:
            raise UnknownModuleError(
                f"Module {module_id} is not installed.", payload={"module_id": module_id}
            )

        previous = self._modules.get_by_id(self._assignments.get(currency_id))
        self._assignments.upsert(currency_id, module.id)
        logger.info(
            "Set provider for %s to %s",
            currency.code,
            module.name,
            extra=assignment_log_extra(
                currency=currency.code,
                event="assignment.set",
                provider=module.name,
                previous=previous.name if previous else None,
            ),
        )
        return module

    def get_currency_rate_info(
        self, registered_only: bool = False, codes_only: bool = False
    ) -> dict[str, ModuleRef | None]:
        """Currency codes mapped to their valid assigned module.

        ``registered_only`` keeps just the currencies whose assignment is
        valid; ``codes_only`` blanks every module.
        """

        source = self._assignments.list_registered() if registered_only else self._assignments.list_all()
        info: dict[str, ModuleRef | None] = {}
        for currency_id, module_id in source.items():
            currency = self._currencies.get_by_id(currency_id)
            if currency is None or not currency.active:
                continue
            module = self._modules.get_by_id(module_id)
            if self._modules.is_valid(module):
                info[currency.code] = None if codes_only else module
            elif not registered_only:
                info[currency.code] = None
        return info

    def get_currency_rate_modules(self) -> dict[str, list[str]]:
        """Installed rate modules mapped to the codes each can price."""

        return {
            module.name: sorted(module.supported_currencies())
            for module in self._modules.list_active_providers_for_hook()
            if module.is_loaded
        }

    def install_module(self, name: str) -> tuple[ModuleRef, dict[str, ModuleRef | None]]:
        """Install a provider module and reconcile assignments against it."""

        module = self._modules.install(name)
        try:
            table = self.scan_missing_assignments()
        except NoDefaultCurrencyError:
            logger.warning("Installed %s but skipped scan: no default currency.", module.name)
            table = {}
        return module, table
