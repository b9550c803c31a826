"""CLI commands managing provider modules and assignments."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from fxregistry.errors import APIError
from fxregistry.services import get_module_directory, get_resolver


def _echo_table(table) -> None:
    for code, module in sorted(table.items()):
        click.echo(f"  {code}: {module.name if module else '-'}")


@click.command("install-provider")
@click.argument("name")
@with_appcontext
def install_provider(name: str) -> None:
    """Install a rate provider module and assign it to currencies lacking one."""

    try:
        module, table = get_resolver().install_module(name)
    except APIError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Installed '{module.name}' ({module.version}).")
    _echo_table(table)


@click.command("uninstall-provider")
@click.argument("name")
@with_appcontext
def uninstall_provider(name: str) -> None:
    """Deactivate a rate provider module; its assignments become stale."""

    try:
        module = get_module_directory().uninstall(name)
    except APIError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Uninstalled '{module.name}'.")


@click.command("scan-providers")
@click.option("--base", default=None, help="Base currency code (defaults to the default currency)")
@with_appcontext
def scan_providers(base: str | None) -> None:
    """Assign providers to currencies that have none or whose provider is gone."""

    resolver = get_resolver()
    try:
        table = resolver.scan_missing_assignments(base)
        base_code = resolver.resolve_base(base)
    except APIError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Scanned {len(table)} currencies against {base_code}.")
    _echo_table(table)
