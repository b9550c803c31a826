"""Route handlers for health checks."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from fxregistry.schemas import HealthStatusSchema
from fxregistry.services import directory, get_module_directory

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    def get(self):
        default = directory.get_default_currency()
        return {
            "status": "ok" if default is not None else "degraded",
            "app": current_app.config.get("APP_NAME", "fx-provider-registry"),
            "default_currency": default.code if default else None,
            "rate_providers": len(get_module_directory().list_active_providers_for_hook()),
        }
