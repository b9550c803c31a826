"""Routes for currency validation and provider assignment."""

from __future__ import annotations

from flask.views import MethodView

from fxregistry.schemas import (
    AssignmentSchema,
    AssignmentTableSchema,
    CurrencyValidationRequestSchema,
    CurrencyValidationResponseSchema,
    RateInfoQuerySchema,
    ServiceOptionsQuerySchema,
    ServiceOptionsResponseSchema,
    SetProviderRequestSchema,
    dump_assignment_table,
)
from fxregistry.services import directory, get_resolver
from fxregistry.validation import validate_currency_code

from . import blp


@blp.route("/validate")
class CurrencyValidation(MethodView):
    @blp.arguments(CurrencyValidationRequestSchema)
    @blp.response(200, CurrencyValidationResponseSchema())
    def post(self, data):
        validated = validate_currency_code(data.get("code"), field="code")
        return {
            "code": validated,
            "message": "Currency code is valid.",
        }


@blp.route("/providers")
class CurrencyProviderTable(MethodView):
    @blp.arguments(RateInfoQuerySchema, location="query")
    @blp.response(200, AssignmentTableSchema())
    def get(self, args):
        info = get_resolver().get_currency_rate_info(
            registered_only=args["registered_only"], codes_only=args["codes_only"]
        )
        default = directory.get_default_currency()
        return {
            "base": default.code if default else None,
            "assignments": dump_assignment_table(info),
        }


@blp.route("/<int:currency_id>/services")
class CurrencyServiceOptions(MethodView):
    @blp.arguments(ServiceOptionsQuerySchema, location="query")
    @blp.response(200, ServiceOptionsResponseSchema())
    def get(self, args, currency_id: int):
        options = get_resolver().get_service_options_for(currency_id, args.get("selected"))
        return {
            "currency_id": currency_id,
            "applicable": options is not None,
            "services": [
                {
                    "id": option.id,
                    "name": option.name,
                    "display_name": option.display_name,
                    "selected": option.selected,
                }
                for option in options or []
            ],
        }


@blp.route("/<int:currency_id>/provider")
class CurrencyProvider(MethodView):
    @blp.arguments(SetProviderRequestSchema)
    @blp.response(200, AssignmentSchema())
    def put(self, data, currency_id: int):
        module = get_resolver().set_module(currency_id, data["module_id"])
        currency = directory.get_by_id(currency_id)
        return {
            "currency_id": currency_id,
            "code": currency.code,
            "module_id": module.id,
            "provider": module.name,
        }
