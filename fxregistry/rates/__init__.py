"""Rates blueprint module."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Rates", __name__, description="Exchange-rate queries through assigned providers")

from . import routes  # noqa: E402,F401
