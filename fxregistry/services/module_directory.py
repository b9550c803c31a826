"""Directory of installed provider modules and their hook registrations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from fxregistry.database import get_session
from fxregistry.errors import UnknownModuleError
from fxregistry.models import ModuleHook, ProviderModule
from fxregistry.providers.base import RATE_HOOK, BaseRateProvider, ProviderError
from fxregistry.providers.registry import get_provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleRef:
    """An installed module row joined with its loaded provider implementation."""

    id: int
    name: str
    display_name: str
    version: str
    active: bool
    hooks: tuple[str, ...] = ()
    provider: BaseRateProvider | None = field(default=None, compare=False, repr=False)

    @property
    def is_loaded(self) -> bool:
        return self.provider is not None

    def supported_currencies(self) -> set[str]:
        if self.provider is None:
            return set()
        return {code.strip().upper() for code in self.provider.supported_currencies()}


class ModuleDirectory:
    """Enumerates installed modules and loads their provider implementations.

    Provider instances are cached per ``(name, version)`` so an upgrade
    never reuses the capability set of the previous version.
    """

    def __init__(self, hook: str = RATE_HOOK) -> None:
        self._hook = hook
        self._instances: dict[tuple[str, str], BaseRateProvider] = {}
        # (name, installed version) -> implementation version already reported.
        self._mismatches: dict[tuple[str, str], str] = {}

    @property
    def hook(self) -> str:
        return self._hook

    def list_active_providers_for_hook(self, hook: str | None = None) -> list[ModuleRef]:
        """Active modules registered on ``hook`` in installation order."""

        session = get_session()
        stmt = (
            select(ProviderModule)
            .join(ModuleHook, ModuleHook.module_id == ProviderModule.id)
            .where(ModuleHook.hook_name == (hook or self._hook))
            .where(ProviderModule.active.is_(True))
            .order_by(ModuleHook.position, ProviderModule.id)
        )
        rows = session.execute(stmt).scalars().all()
        return [self._to_ref(row) for row in rows]

    def get_by_name(self, name: str) -> ModuleRef | None:
        session = get_session()
        row = session.execute(
            select(ProviderModule).where(ProviderModule.name == name.strip().lower())
        ).scalar_one_or_none()
        return self._to_ref(row) if row is not None else None

    def get_by_id(self, module_id: int | None) -> ModuleRef | None:
        if module_id is None:
            return None
        row = get_session().get(ProviderModule, module_id)
        return self._to_ref(row) if row is not None else None

    def is_valid(self, module: ModuleRef | None) -> bool:
        """True when the module is active, hooked as a rate provider and loadable."""

        return (
            module is not None
            and module.active
            and self._hook in module.hooks
            and module.is_loaded
        )

    def install(self, name: str) -> ModuleRef:
        """Install (or upgrade/reactivate) the module backed by provider ``name``."""

        try:
            provider = get_provider(name)
        except ProviderError as exc:
            raise UnknownModuleError(str(exc), payload={"module": name}) from exc

        session = get_session()
        try:
            row = session.execute(
                select(ProviderModule).where(ProviderModule.name == provider.name)
            ).scalar_one_or_none()
            if row is None:
                row = ProviderModule(name=provider.name)
                session.add(row)
            previous_version = row.version
            row.display_name = provider.label()
            row.version = provider.version
            row.active = True
            session.flush()

            registered = {hook.hook_name for hook in row.hooks}
            for hook_name in provider.hooks:
                if hook_name in registered:
                    continue
                session.add(
                    ModuleHook(
                        module_id=row.id,
                        hook_name=hook_name,
                        position=self._next_position(session, hook_name),
                    )
                )
                session.flush()
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise

        self._forget(provider.name)
        self._instances[(provider.name, provider.version)] = provider
        if previous_version and previous_version != provider.version:
            logger.info(
                "Upgraded module %s from %s to %s", provider.name, previous_version, provider.version
            )
        else:
            logger.info("Installed module %s (%s)", provider.name, provider.version)
        return self._to_ref(row)

    def uninstall(self, name: str) -> ModuleRef:
        """Deactivate a module and drop its hooks; existing assignments go stale."""

        session = get_session()
        try:
            row = session.execute(
                select(ProviderModule).where(ProviderModule.name == name.strip().lower())
            ).scalar_one_or_none()
            if row is None:
                raise UnknownModuleError(
                    f"Module '{name}' is not installed.", payload={"module": name}
                )
            row.active = False
            session.execute(delete(ModuleHook).where(ModuleHook.module_id == row.id))
            session.commit()
            session.refresh(row)
        except SQLAlchemyError:
            session.rollback()
            raise

        self._forget(row.name)
        logger.info("Uninstalled module %s", row.name)
        return self._to_ref(row)

    def clear_cache(self) -> None:
        self._instances.clear()
        self._mismatches.clear()

    def _next_position(self, session, hook_name: str) -> int:
        current = session.execute(
            select(func.max(ModuleHook.position)).where(ModuleHook.hook_name == hook_name)
        ).scalar()
        return (current or 0) + 1

    def _forget(self, name: str) -> None:
        for key in [key for key in self._instances if key[0] == name]:
            del self._instances[key]
        for key in [key for key in self._mismatches if key[0] == name]:
            del self._mismatches[key]

    def _load_provider(self, name: str, version: str) -> BaseRateProvider | None:
        key = (name, version)
        cached = self._instances.get(key)
        if cached is not None:
            return cached

        try:
            provider = get_provider(name)
        except ProviderError as exc:
            logger.warning("Module %s has no loadable provider: %s", name, exc)
            return None
        if provider.version != version:
            log = logger.debug if self._mismatches.get(key) == provider.version else logger.warning
            log(
                "Module %s installed at %s but implementation is %s; reinstall to upgrade.",
                name,
                version,
                provider.version,
            )
            self._mismatches[key] = provider.version
            return None

        self._forget(name)
        self._instances[key] = provider
        return provider

    def _to_ref(self, row: ProviderModule) -> ModuleRef:
        hooks = tuple(hook.hook_name for hook in row.hooks)
        provider = self._load_provider(row.name, row.version) if row.active else None
        return ModuleRef(
            id=row.id,
            name=row.name,
            display_name=row.display_name,
            version=row.version,
            active=bool(row.active),
            hooks=hooks,
            provider=provider,
        )
