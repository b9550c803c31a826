"""Service layer: directories, assignment store, resolver and rate queries."""

from __future__ import annotations

import logging

from flask import Flask, current_app
from sqlalchemy.exc import OperationalError

from config import parse_provider_names

from .assignment_store import AssignmentStore
from .currency_directory import CurrencyDirectory, CurrencyRecord, directory, init_currency_directory
from .module_directory import ModuleDirectory, ModuleRef
from .rate_query import RateQueryService, RefreshOutcome, RefreshStatus
from .resolution import ProviderResolver, ServiceOption

logger = logging.getLogger(__name__)

__all__ = [
    "AssignmentStore",
    "CurrencyDirectory",
    "CurrencyRecord",
    "ModuleDirectory",
    "ModuleRef",
    "ProviderResolver",
    "RateQueryService",
    "RefreshOutcome",
    "RefreshStatus",
    "ServiceOption",
    "directory",
    "get_module_directory",
    "get_rate_query",
    "get_resolver",
    "init_services",
]


def init_services(app: Flask) -> ProviderResolver:
    """Wire the directories, store and resolver onto the Flask app."""

    currencies = init_currency_directory(app)
    modules = ModuleDirectory(hook=app.config.get("RATE_PROVIDER_HOOK", "currencyRates"))
    assignments = AssignmentStore()
    resolver = ProviderResolver(currencies, modules, assignments)
    rate_query = RateQueryService(resolver, modules, currencies)

    app.extensions["module_directory"] = modules
    app.extensions["assignment_store"] = assignments
    app.extensions["provider_resolver"] = resolver
    app.extensions["rate_query"] = rate_query

    auto_install = parse_provider_names(app.config.get("AUTO_INSTALL_PROVIDERS"))
    if auto_install:
        with app.app_context():
            try:
                for name in auto_install:
                    if modules.get_by_name(name) is None:
                        resolver.install_module(name)
                        logger.info("Auto-installed provider module %s", name)
            except OperationalError:
                # Migrations may not have created the tables yet.
                logger.warning("Skipping provider auto-install; schema not ready.")
    return resolver


def get_resolver() -> ProviderResolver:
    return current_app.extensions["provider_resolver"]


def get_module_directory() -> ModuleDirectory:
    return current_app.extensions["module_directory"]


def get_rate_query() -> RateQueryService:
    return current_app.extensions["rate_query"]
