"""Routes for provider module installation, discovery and reconciliation."""

from __future__ import annotations

from flask.views import MethodView

from fxregistry.errors import UnknownModuleError
from fxregistry.schemas import (
    AssignmentTableSchema,
    ErrorMessageSchema,
    ProviderInstallResponseSchema,
    ProviderLookupQuerySchema,
    ProviderModuleSchema,
    ScanRequestSchema,
    dump_assignment_table,
    dump_module,
)
from fxregistry.services import get_module_directory, get_resolver
from fxregistry.validation import validate_currency_code

from . import blp


@blp.route("")
class ProviderModuleList(MethodView):
    @blp.response(200, ProviderModuleSchema(many=True))
    def get(self):
        modules = get_module_directory().list_active_providers_for_hook()
        return [dump_module(module) for module in modules]


@blp.route("/lookup")
class ProviderLookup(MethodView):
    @blp.arguments(ProviderLookupQuerySchema, location="query")
    @blp.response(200, ProviderModuleSchema(many=True))
    def get(self, args):
        result = get_resolver().find_providers(
            args["to"], args.get("from_code"), just_one=args["just_one"]
        )
        if args["just_one"]:
            result = [result] if result is not None else []
        return [dump_module(module) for module in result]


@blp.route("/scan")
class ProviderScan(MethodView):
    @blp.arguments(ScanRequestSchema)
    @blp.response(200, AssignmentTableSchema())
    def post(self, data):
        resolver = get_resolver()
        base = data.get("base")
        if base:
            base = validate_currency_code(base, field="base")
        table = resolver.scan_missing_assignments(base)
        return {
            "base": resolver.resolve_base(base),
            "assignments": dump_assignment_table(table),
        }


@blp.route("/<string:name>")
class ProviderModuleItem(MethodView):
    @blp.response(200, ProviderModuleSchema())
    @blp.alt_response(404, schema=ErrorMessageSchema)
    def get(self, name: str):
        module = get_module_directory().get_by_name(name)
        if module is None:
            raise UnknownModuleError(f"Module '{name}' is not installed.", payload={"module": name})
        return dump_module(module)

    @blp.response(200, ProviderModuleSchema())
    @blp.alt_response(404, schema=ErrorMessageSchema)
    def delete(self, name: str):
        module = get_module_directory().uninstall(name)
        return dump_module(module)


@blp.route("/<string:name>/install")
class ProviderInstall(MethodView):
    @blp.response(201, ProviderInstallResponseSchema())
    @blp.alt_response(404, schema=ErrorMessageSchema)
    def post(self, name: str):
        module, table = get_resolver().install_module(name)
        return {
            "module": dump_module(module),
            "assignments": dump_assignment_table(table),
        }
