from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fxregistry.models import Currency
from fxregistry.services import directory


def test_directory_resolves_codes_and_ids(currency_ids):
    assert directory.get_by_code("eur") == currency_ids["EUR"]
    record = directory.get_by_id(currency_ids["EUR"])
    assert record.code == "EUR"
    assert record.name == "Euro"
    assert directory.get_by_code("XYZ") is None
    assert directory.is_allowed("gbp")
    assert directory.codes == {"USD", "EUR", "GBP", "JPY", "CHF"}


def test_default_currency(currency_ids):
    default = directory.get_default_currency()
    assert default.code == "USD"
    assert default.id == currency_ids["USD"]


def test_cache_does_not_see_external_writes_until_invalidated(db_session):
    assert "SEK" not in directory.codes
    db_session.add(Currency(code="SEK", name="Swedish Krona", active=True))
    db_session.commit()

    assert directory.get_by_code("SEK") is None
    directory.invalidate()
    assert directory.get_by_code("SEK") is not None


def test_add_currency_invalidates_cache():
    record = directory.add("sek", "Swedish Krona")

    assert record.code == "SEK"
    assert directory.get_by_code("SEK") == record.id
    assert directory.get_default_currency().code == "USD"


def test_add_default_currency_replaces_previous_default(db_session):
    record = directory.add("NOK", "Norwegian Krone", is_default=True)

    assert directory.get_default_currency().id == record.id
    defaults = db_session.query(Currency).filter(Currency.is_default.is_(True)).all()
    assert [currency.code for currency in defaults] == ["NOK"]


def test_set_default(currency_ids):
    directory.set_default(currency_ids["EUR"])
    assert directory.get_default_currency().code == "EUR"


def test_deactivate_hides_code_but_keeps_id(currency_ids):
    directory.deactivate(currency_ids["GBP"])

    assert directory.get_by_code("GBP") is None
    record = directory.get_by_id(currency_ids["GBP"])
    assert record is not None and record.active is False
    assert "GBP" not in {currency.code for currency in directory.list_active()}


def test_deactivating_default_leaves_no_default(currency_ids):
    directory.deactivate(currency_ids["USD"])
    assert directory.get_default_currency() is None


def test_record_rate_persists_conversion_rate(db_session, currency_ids):
    directory.record_rate(currency_ids["EUR"], 0.92, datetime(2025, 10, 16, 12, 0))

    row = db_session.get(Currency, currency_ids["EUR"])
    db_session.refresh(row)
    assert row.conversion_rate == Decimal("0.92")
    assert row.rate_updated_at is not None
