"""seed currencies

Revision ID: 7a4e2c9d5b31
Revises: 3c1f9a7b2d10
Create Date: 2026-10-18 09:20:03.551872

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

currencies_table = sa.table(
    "currencies",
    sa.column("code", sa.String(length=3)),
    sa.column("name", sa.String(length=120)),
    sa.column("is_default", sa.Boolean()),
    sa.column("active", sa.Boolean()),
)


# revision identifiers, used by Alembic.
revision: str = '7a4e2c9d5b31'
down_revision: Union[str, Sequence[str], None] = '3c1f9a7b2d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SEED_CURRENCIES = [
    ("USD", "United States Dollar"),
    ("EUR", "Euro"),
    ("GBP", "British Pound Sterling"),
    ("JPY", "Japanese Yen"),
    ("CHF", "Swiss Franc"),
    ("CAD", "Canadian Dollar"),
    ("AUD", "Australian Dollar"),
    ("SEK", "Swedish Krona"),
    ("NOK", "Norwegian Krone"),
    ("PLN", "Polish Zloty"),
]


def upgrade() -> None:
    """Upgrade schema."""
    op.bulk_insert(
        currencies_table,
        [
            {"code": code, "name": name, "is_default": code == "USD", "active": True}
            for code, name in SEED_CURRENCIES
        ],
    )


def downgrade() -> None:
    """Downgrade schema."""
    codes = [code for code, _ in SEED_CURRENCIES]
    op.execute(currencies_table.delete().where(currencies_table.c.code.in_(codes)))
