from __future__ import annotations

import pytest

from fxregistry.errors import InvalidCodeError, NoDefaultCurrencyError, UnknownModuleError
from fxregistry.models import Currency
from fxregistry.services import directory
from tests.factories import (
    ExplodingCapabilityProvider,
    OtherHookModule,
    make_static_provider,
    register_instance,
    register_static,
)


def test_scan_assigns_unassigned_currency_to_supporting_module(resolver, modules, store, currency_ids):
    register_static("alpha", ["USD", "EUR", "GBP"])
    alpha = modules.install("alpha")

    table = resolver.scan_missing_assignments("USD")

    assert table["EUR"].name == "alpha"
    assert table["GBP"].name == "alpha"
    assert table["JPY"] is None
    assert store.get(currency_ids["EUR"]) == alpha.id
    assert store.get(currency_ids["JPY"]) is None


def test_find_providers_returns_all_matches_in_listing_order(resolver, modules):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR"])
    modules.install("alpha")
    modules.install("beta")

    found = resolver.find_providers("EUR", "USD", just_one=False)

    assert [module.name for module in found] == ["alpha", "beta"]


def test_find_providers_just_one_returns_first_match_or_none(resolver, modules):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR", "JPY"])
    modules.install("alpha")
    modules.install("beta")

    assert resolver.find_providers("EUR", "USD", just_one=True).name == "alpha"
    assert resolver.find_providers("JPY", "USD", just_one=True).name == "beta"
    assert resolver.find_providers("CHF", "USD", just_one=True) is None
    assert resolver.find_providers("CHF", "USD") == []


def test_find_providers_requires_both_codes_supported(resolver, modules):
    register_static("alpha", ["EUR", "GBP"])
    modules.install("alpha")

    assert resolver.find_providers("EUR", "USD") == []
    assert [module.name for module in resolver.find_providers("EUR", "GBP")] == ["alpha"]


def test_find_providers_defaults_base_to_default_currency(resolver, modules):
    register_static("alpha", ["USD", "EUR"])
    modules.install("alpha")

    assert resolver.find_providers("eur", just_one=True).name == "alpha"


def test_find_providers_rejects_malformed_codes(resolver):
    with pytest.raises(InvalidCodeError):
        resolver.find_providers("EURO", "USD")
    with pytest.raises(InvalidCodeError):
        resolver.find_providers("", "USD")


def test_find_providers_ignores_modules_on_other_hooks(resolver, modules):
    register_instance(OtherHookModule({"USD": 1.0, "EUR": 0.9}, name="banner"))
    modules.install("banner")

    assert resolver.find_providers("EUR", "USD") == []


def test_find_providers_is_deterministic(resolver, modules):
    for name in ("alpha", "beta", "gamma"):
        register_static(name, ["USD", "EUR"])
        modules.install(name)

    first = [module.name for module in resolver.find_providers("EUR", "USD")]
    second = [module.name for module in resolver.find_providers("EUR", "USD")]

    assert first == second == ["alpha", "beta", "gamma"]


def test_scan_reassigns_currency_whose_module_was_uninstalled(resolver, modules, store, currency_ids):
    register_static("gamma", ["USD", "EUR"])
    register_static("delta", ["USD", "EUR"])
    gamma = modules.install("gamma")
    resolver.scan_missing_assignments("USD")
    assert store.get(currency_ids["EUR"]) == gamma.id

    delta = modules.install("delta")
    modules.uninstall("gamma")
    table = resolver.scan_missing_assignments("USD")

    assert table["EUR"].name == "delta"
    assert store.get(currency_ids["EUR"]) == delta.id


def test_scan_leaves_stale_assignment_when_no_replacement(resolver, modules, store, currency_ids):
    register_static("gamma", ["USD", "EUR"])
    gamma = modules.install("gamma")
    resolver.scan_missing_assignments("USD")

    modules.uninstall("gamma")
    table = resolver.scan_missing_assignments("USD")

    assert table["EUR"] is None
    # The row is kept; it is simply no longer considered valid.
    assert store.get(currency_ids["EUR"]) == gamma.id
    assert "EUR" not in resolver.get_currency_rate_info(registered_only=True)


def test_scan_treats_unloadable_module_as_stale(resolver, modules, store, currency_ids):
    from fxregistry.providers.registry import unregister_provider

    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR"])
    modules.install("alpha")
    beta = modules.install("beta")
    resolver.scan_missing_assignments("USD")

    unregister_provider("alpha")
    modules.clear_cache()
    resolver.scan_missing_assignments("USD")

    assert store.get(currency_ids["EUR"]) == beta.id


def test_scan_keeps_valid_assignments(resolver, modules, store, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR"])
    modules.install("alpha")
    beta = modules.install("beta")
    resolver.set_module(currency_ids["EUR"], beta.id)

    resolver.scan_missing_assignments("USD")

    assert store.get(currency_ids["EUR"]) == beta.id


def test_scan_skips_inactive_currencies(resolver, modules, currency_ids):
    register_static("alpha", ["USD", "EUR", "GBP"])
    modules.install("alpha")
    directory.deactivate(currency_ids["GBP"])

    table = resolver.scan_missing_assignments("USD")

    assert "GBP" not in table
    assert table["EUR"].name == "alpha"


def test_scan_survives_provider_failing_capability_lookup(resolver, modules, currency_ids):
    register_instance(ExplodingCapabilityProvider("broken", ["USD", "EUR"]))
    modules.install("broken")

    table = resolver.scan_missing_assignments("USD")

    assert table["EUR"] is None


def test_scan_without_default_currency_raises(app, resolver, db_session):
    db_session.query(Currency).update({Currency.is_default: False})
    db_session.commit()
    directory.invalidate()

    with pytest.raises(NoDefaultCurrencyError):
        resolver.scan_missing_assignments()


def test_scan_with_explicit_base_does_not_need_default(resolver, modules, db_session):
    db_session.query(Currency).update({Currency.is_default: False})
    db_session.commit()
    directory.invalidate()
    register_static("alpha", ["EUR", "GBP"])
    modules.install("alpha")

    table = resolver.scan_missing_assignments("EUR")

    assert table["GBP"].name == "alpha"


def test_set_module_is_idempotent(resolver, modules, store, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    alpha = modules.install("alpha")

    resolver.set_module(currency_ids["EUR"], alpha.id)
    resolver.set_module(currency_ids["EUR"], alpha.id)

    assert store.get(currency_ids["EUR"]) == alpha.id
    assert list(store.list_registered().values()).count(alpha.id) == 1


def test_set_module_replaces_previous_assignment(resolver, modules, store, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR"])
    alpha = modules.install("alpha")
    beta = modules.install("beta")

    resolver.set_module(currency_ids["EUR"], alpha.id)
    module = resolver.set_module(currency_ids["EUR"], beta.id)

    assert module.name == "beta"
    assert store.get(currency_ids["EUR"]) == beta.id


def test_set_module_rejects_unknown_currency_and_module(resolver, modules, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    alpha = modules.install("alpha")

    with pytest.raises(InvalidCodeError):
        resolver.set_module(99999, alpha.id)
    with pytest.raises(UnknownModuleError):
        resolver.set_module(currency_ids["EUR"], 99999)


def test_provider_for_assigns_lazily(resolver, modules, store, currency_ids):
    register_static("alpha", ["USD", "JPY"])
    alpha = modules.install("alpha")

    module = resolver.provider_for("jpy")

    assert module.name == "alpha"
    assert store.get(currency_ids["JPY"]) == alpha.id


def test_provider_for_without_persist_leaves_store_untouched(resolver, modules, store, currency_ids):
    register_static("alpha", ["USD", "JPY"])
    modules.install("alpha")

    assert resolver.provider_for("JPY", persist=False).name == "alpha"
    assert store.get(currency_ids["JPY"]) is None


def test_provider_for_unknown_currency_raises(resolver):
    with pytest.raises(InvalidCodeError):
        resolver.provider_for("XYZ")


def test_provider_for_returns_none_without_candidates(resolver):
    assert resolver.provider_for("CHF") is None


def test_get_service_options_for_default_currency_is_not_applicable(resolver, currency_ids):
    assert resolver.get_service_options_for(currency_ids["USD"]) is None


def test_get_service_options_marks_selected(resolver, modules, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR"])
    register_static("gamma", ["USD", "GBP"])
    for name in ("alpha", "beta", "gamma"):
        modules.install(name)

    options = resolver.get_service_options_for(currency_ids["EUR"], "beta")

    assert [(option.name, option.selected) for option in options] == [
        ("alpha", False),
        ("beta", True),
    ]


def test_get_service_options_for_unknown_currency(resolver):
    with pytest.raises(InvalidCodeError):
        resolver.get_service_options_for(424242)


def test_get_currency_rate_info_variants(resolver, modules, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    alpha = modules.install("alpha")
    resolver.set_module(currency_ids["EUR"], alpha.id)

    full = resolver.get_currency_rate_info()
    registered = resolver.get_currency_rate_info(registered_only=True)
    codes = resolver.get_currency_rate_info(registered_only=True, codes_only=True)

    assert set(full) == {"USD", "EUR", "GBP", "JPY", "CHF"}
    assert full["EUR"].name == "alpha"
    assert full["GBP"] is None
    assert set(registered) == {"EUR"}
    assert codes == {"EUR": None}


def test_get_currency_rate_modules(resolver, modules):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["GBP", "USD"])
    modules.install("alpha")
    modules.install("beta")

    assert resolver.get_currency_rate_modules() == {
        "alpha": ["EUR", "USD"],
        "beta": ["GBP", "USD"],
    }


def test_upgraded_implementation_makes_old_install_stale(resolver, modules, store, currency_ids):
    from fxregistry.providers.registry import register_provider

    register_static("alpha", ["USD", "EUR"], version="1.0.0")
    alpha = modules.install("alpha")
    resolver.set_module(currency_ids["EUR"], alpha.id)

    upgraded = make_static_provider("alpha", ["USD", "EUR"], version="2.0.0")
    register_provider("alpha", lambda: upgraded)
    modules.clear_cache()

    assert not modules.is_valid(modules.get_by_id(alpha.id))
    assert resolver.provider_for("EUR") is None

    reinstalled = modules.install("alpha")

    assert reinstalled.id == alpha.id
    assert reinstalled.version == "2.0.0"
    assert resolver.provider_for("EUR").name == "alpha"


def test_install_module_scans_assignments(resolver, store, currency_ids):
    register_static("alpha", ["USD", "EUR"])

    module, table = resolver.install_module("alpha")

    assert module.name == "alpha"
    assert table["EUR"].name == "alpha"
    assert store.get(currency_ids["EUR"]) == module.id


def test_install_module_without_default_currency_skips_scan(resolver, db_session):
    db_session.query(Currency).update({Currency.is_default: False})
    db_session.commit()
    directory.invalidate()
    register_static("alpha", ["USD", "EUR"])

    module, table = resolver.install_module("alpha")

    assert module.name == "alpha"
    assert table == {}


def test_provider_for_other_base_does_not_reassign_valid_module(resolver, modules, store, currency_ids):
    register_static("alpha", ["USD", "EUR"])
    register_static("beta", ["USD", "EUR", "JPY"])
    alpha = modules.install("alpha")
    modules.install("beta")
    resolver.set_module(currency_ids["EUR"], alpha.id)

    module = resolver.provider_for("EUR", "JPY")

    assert module.name == "beta"
    assert store.get(currency_ids["EUR"]) == alpha.id


def test_provider_for_other_base_assigns_unassigned_currency(resolver, modules, store, currency_ids):
    register_static("beta", ["USD", "EUR", "JPY"])
    beta = modules.install("beta")

    assert resolver.provider_for("EUR", "JPY").name == "beta"
    assert store.get(currency_ids["EUR"]) == beta.id
