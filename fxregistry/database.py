"""SQLAlchemy database helpers and session management."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, scoped_session, sessionmaker


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


# Thread-local scoped session used across the application.
SessionLocal = scoped_session(sessionmaker())

_engine: Optional[Engine] = None


def init_app(app: Any) -> None:
    """Configure SQLAlchemy engine and session for the Flask application."""

    global _engine

    if _engine is None:
        database_uri = app.config["SQLALCHEMY_DATABASE_URI"]
        _engine = create_engine(database_uri, future=True)
        if _engine.dialect.name == "sqlite":
            event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
        SessionLocal.configure(bind=_engine, autoflush=False)

    @app.teardown_appcontext
    def shutdown_session(_: Optional[BaseException] = None) -> None:
        SessionLocal.remove()

    app.extensions["sqlalchemy_engine"] = _engine
    app.extensions["sqlalchemy_session_factory"] = SessionLocal


def get_session() -> scoped_session:
    """Expose the configured session factory."""

    return SessionLocal


def dispose_engine() -> None:
    """Close pooled connections and forget the engine so init_app can rebind."""

    global _engine

    SessionLocal.remove()
    if _engine is not None:
        _engine.dispose()
    _engine = None


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # Assignment rows rely on ON DELETE CASCADE / SET NULL.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
