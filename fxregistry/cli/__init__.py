"""CLI entry points."""

from __future__ import annotations

from flask import Flask

from .providers import install_provider, scan_providers, uninstall_provider
from .rates import refresh_rates


def register_cli(app: Flask) -> None:
    """Register CLI commands on the given Flask app."""

    app.cli.add_command(install_provider)
    app.cli.add_command(uninstall_provider)
    app.cli.add_command(scan_providers)
    app.cli.add_command(refresh_rates)
