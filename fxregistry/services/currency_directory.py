"""Currency directory with an explicit, invalidated lookup cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from fxregistry.database import get_session
from fxregistry.models import Currency
from fxregistry.providers.schemas import normalize_code
from fxregistry.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrencyRecord:
    """Read-only view of a currency row."""

    id: int
    code: str
    name: str | None
    is_default: bool
    active: bool


@dataclass
class CurrencyCache:
    """Process-lifetime snapshot of the currencies table."""

    by_id: dict[int, CurrencyRecord] = field(default_factory=dict)
    by_code: dict[str, CurrencyRecord] = field(default_factory=dict)
    default: CurrencyRecord | None = None
    loaded: bool = False

    def clear(self) -> None:
        self.by_id.clear()
        self.by_code.clear()
        self.default = None
        self.loaded = False


class CurrencyDirectory:
    """Resolves currency codes and identifiers and exposes the default currency.

    Reads are served from a cache that is dropped whenever a currency is
    written through this directory. Writes made elsewhere must call
    ``invalidate``.
    """

    def __init__(self) -> None:
        self._cache = CurrencyCache()

    def load(self) -> None:
        """Load currencies from the database into the cache."""

        self._cache.clear()
        session = get_session()
        try:
            rows = session.execute(select(Currency).order_by(Currency.id)).scalars().all()
        except OperationalError:
            # Migrations may not have created the table yet; keep the cache empty.
            session.rollback()
            logger.warning("Currency table unavailable; directory left empty.")
            return

        for row in rows:
            record = _to_record(row)
            self._cache.by_id[record.id] = record
            if record.active:
                self._cache.by_code[record.code] = record
                if record.is_default and self._cache.default is None:
                    self._cache.default = record
        self._cache.loaded = True

    def invalidate(self) -> None:
        self._cache.clear()

    @property
    def codes(self) -> set[str]:
        self._ensure_loaded()
        return set(self._cache.by_code)

    def get_default_currency(self) -> CurrencyRecord | None:
        self._ensure_loaded()
        return self._cache.default

    def get_by_code(self, code: str) -> int | None:
        """Return the id of the active currency with ``code``."""

        self._ensure_loaded()
        record = self._cache.by_code.get(str(code).strip().upper())
        return record.id if record else None

    def get_record_by_code(self, code: str) -> CurrencyRecord | None:
        self._ensure_loaded()
        return self._cache.by_code.get(str(code).strip().upper())

    def get_by_id(self, currency_id: int) -> CurrencyRecord | None:
        self._ensure_loaded()
        return self._cache.by_id.get(currency_id)

    def list_active(self) -> list[CurrencyRecord]:
        self._ensure_loaded()
        return list(self._cache.by_code.values())

    def is_allowed(self, code: str) -> bool:
        return self.get_by_code(code) is not None

    def add(self, code: str, name: str | None = None, *, is_default: bool = False) -> CurrencyRecord:
        """Create a currency; optionally make it the single default one."""

        normalized = normalize_code(code)
        session = get_session()
        try:
            if is_default:
                session.execute(update(Currency).values(is_default=False))
            currency = Currency(code=normalized, name=name, is_default=is_default, active=True)
            session.add(currency)
            session.commit()
            record = _to_record(currency)
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            self.invalidate()
        return record

    def set_default(self, currency_id: int) -> None:
        session = get_session()
        try:
            session.execute(update(Currency).values(is_default=False))
            session.execute(
                update(Currency).where(Currency.id == currency_id).values(is_default=True)
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            self.invalidate()

    def deactivate(self, currency_id: int) -> None:
        """Soft-delete a currency; its assignment row is kept but ignored."""

        session = get_session()
        try:
            session.execute(
                update(Currency)
                .where(Currency.id == currency_id)
                .values(active=False, is_default=False)
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            self.invalidate()

    def record_rate(self, currency_id: int, rate: float, as_of: datetime) -> None:
        """Store the latest conversion rate (relative to the default currency)."""

        session = get_session()
        try:
            session.execute(
                update(Currency)
                .where(Currency.id == currency_id)
                .values(conversion_rate=Decimal(str(rate)), rate_updated_at=ensure_utc(as_of))
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            self.invalidate()

    def _ensure_loaded(self) -> None:
        if not self._cache.loaded:
            self.load()


def _to_record(row: Currency) -> CurrencyRecord:
    return CurrencyRecord(
        id=row.id,
        code=row.code.upper(),
        name=row.name,
        is_default=bool(row.is_default),
        active=bool(row.active),
    )


directory = CurrencyDirectory()


def init_currency_directory(app) -> CurrencyDirectory:
    """Attach the directory to the Flask app and populate the cache."""

    directory.load()
    app.extensions["currency_directory"] = directory
    return directory
