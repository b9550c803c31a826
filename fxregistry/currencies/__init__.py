"""Currencies blueprint: validation and provider assignment endpoints."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Currencies", __name__, description="Currency validation and provider assignment")

from . import routes  # noqa: E402,F401
