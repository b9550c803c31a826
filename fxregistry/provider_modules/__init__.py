"""Provider modules blueprint: install, discovery and reconciliation endpoints."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Providers", __name__, description="Rate provider modules")

from . import routes  # noqa: E402,F401
