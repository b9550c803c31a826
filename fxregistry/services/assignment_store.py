"""Persistence of currency -> provider module assignments."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from fxregistry.database import get_session
from fxregistry.models import Currency, CurrencyProviderAssignment
from fxregistry.utils.datetime import utc_now

_UPSERT_DIALECTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class AssignmentStore:
    """One row per currency holding a nullable reference to its provider module."""

    def get(self, currency_id: int) -> int | None:
        """Return the assigned module id, or None when unassigned."""

        session = get_session()
        return session.execute(
            select(CurrencyProviderAssignment.module_id).where(
                CurrencyProviderAssignment.currency_id == currency_id
            )
        ).scalar_one_or_none()

    def upsert(self, currency_id: int, module_id: int | None) -> None:
        """Insert or replace the assignment for ``currency_id`` in one statement."""

        session = get_session()
        values = {"currency_id": currency_id, "module_id": module_id, "updated_at": utc_now()}
        try:
            insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
            if insert is not None:
                stmt = insert(CurrencyProviderAssignment).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[CurrencyProviderAssignment.currency_id],
                    set_={"module_id": stmt.excluded.module_id, "updated_at": stmt.excluded.updated_at},
                )
                session.execute(stmt)
            else:
                session.merge(CurrencyProviderAssignment(**values))
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise

    def list_all(self) -> dict[int, int | None]:
        """Every active currency id mapped to its module id (None when unassigned)."""

        session = get_session()
        stmt = (
            select(Currency.id, CurrencyProviderAssignment.module_id)
            .outerjoin(
                CurrencyProviderAssignment,
                CurrencyProviderAssignment.currency_id == Currency.id,
            )
            .where(Currency.active.is_(True))
            .order_by(Currency.id)
        )
        return {currency_id: module_id for currency_id, module_id in session.execute(stmt)}

    def list_registered(self) -> dict[int, int | None]:
        """Only the currencies that have an assignment row."""

        session = get_session()
        stmt = select(
            CurrencyProviderAssignment.currency_id, CurrencyProviderAssignment.module_id
        ).order_by(CurrencyProviderAssignment.currency_id)
        return {currency_id: module_id for currency_id, module_id in session.execute(stmt)}

