"""Shared pytest fixtures."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import delete

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from fxregistry import create_app  # noqa: E402
from fxregistry.database import dispose_engine, get_session  # noqa: E402
from fxregistry.models import (  # noqa: E402
    Currency,
    CurrencyProviderAssignment,
    ModuleHook,
    ProviderModule,
)
from fxregistry.providers.registry import reset_registry  # noqa: E402
from fxregistry.services.currency_directory import directory  # noqa: E402

TEST_CURRENCIES = [
    ("USD", "United States Dollar", True),
    ("EUR", "Euro", False),
    ("GBP", "British Pound Sterling", False),
    ("JPY", "Japanese Yen", False),
    ("CHF", "Swiss Franc", False),
]


@pytest.fixture(scope="session")
def app(tmp_path_factory: pytest.TempPathFactory) -> Iterator:
    """Session-wide Flask application configured with a temporary database."""

    db_dir = tmp_path_factory.mktemp("db")
    database_url = f"sqlite:///{db_dir / 'test.db'}"

    alembic_cfg = Config(str(ROOT_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(ROOT_DIR / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    alembic_cfg.attributes["explicit_url"] = True
    command.upgrade(alembic_cfg, "head")

    flask_app = create_app(
        "development",
        overrides={
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": database_url,
            "AUTO_INSTALL_PROVIDERS": "",
            "LOG_LEVEL": "WARNING",
        },
    )

    yield flask_app

    dispose_engine()
    command.downgrade(alembic_cfg, "base")
    directory.invalidate()


@pytest.fixture(autouse=True)
def clean_state(app) -> Iterator:
    """Reset tables, provider factories and caches before every test."""

    with app.app_context():
        session = get_session()
        session.execute(delete(CurrencyProviderAssignment))
        session.execute(delete(ModuleHook))
        session.execute(delete(ProviderModule))
        session.execute(delete(Currency))
        session.add_all(
            Currency(code=code, name=name, is_default=is_default, active=True)
            for code, name, is_default in TEST_CURRENCIES
        )
        session.commit()

        reset_registry()
        app.extensions["module_directory"].clear_cache()
        directory.invalidate()

        yield

        get_session().rollback()


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


@pytest.fixture()
def db_session(app):
    """The thread-local session used by the services."""

    return get_session()


@pytest.fixture()
def resolver(app):
    return app.extensions["provider_resolver"]


@pytest.fixture()
def modules(app):
    return app.extensions["module_directory"]


@pytest.fixture()
def store(app):
    return app.extensions["assignment_store"]


@pytest.fixture()
def rate_query(app):
    return app.extensions["rate_query"]


@pytest.fixture()
def currency_ids() -> dict[str, int]:
    """Map each seeded currency code to its id."""

    return {code: directory.get_by_code(code) for code, _, _ in TEST_CURRENCIES}
