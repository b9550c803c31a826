"""CLI for refreshing stored currency conversion rates."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from fxregistry.errors import APIError
from fxregistry.services import RefreshStatus, get_rate_query


@click.command("refresh-rates")
@with_appcontext
def refresh_rates() -> None:
    """Fetch rates for every currency from its assigned provider."""

    try:
        outcomes = get_rate_query().refresh_currency_rates()
    except APIError as exc:
        raise click.ClickException(exc.message) from exc

    for code, outcome in sorted(outcomes.items()):
        if outcome.status is RefreshStatus.UPDATED:
            click.echo(f"  {code}: {outcome.rate} ({outcome.provider})")
        else:
            click.echo(f"  {code}: {outcome.status.value}")
    updated = sum(1 for outcome in outcomes.values() if outcome.status is RefreshStatus.UPDATED)
    click.echo(f"Updated {updated} of {len(outcomes)} currencies.")
