"""Schemas for API requests and responses."""

from __future__ import annotations

from marshmallow import Schema, fields


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()
    default_currency = fields.String(allow_none=True)
    rate_providers = fields.Integer()


class CurrencyValidationRequestSchema(Schema):
    code = fields.String(load_default=None)


class CurrencyValidationResponseSchema(Schema):
    code = fields.String(required=True)
    message = fields.String(required=True)


class ServiceOptionsQuerySchema(Schema):
    selected = fields.String(load_default=None)


class ServiceOptionSchema(Schema):
    id = fields.Integer(required=True)
    name = fields.String(required=True)
    display_name = fields.String(required=True)
    selected = fields.Boolean(required=True)


class ServiceOptionsResponseSchema(Schema):
    currency_id = fields.Integer(required=True)
    applicable = fields.Boolean(required=True)
    services = fields.List(fields.Nested(ServiceOptionSchema), required=True)


class SetProviderRequestSchema(Schema):
    module_id = fields.Integer(required=True, strict=True)


class AssignmentSchema(Schema):
    currency_id = fields.Integer(required=True)
    code = fields.String(required=True)
    module_id = fields.Integer(required=True)
    provider = fields.String(required=True)


class RateInfoQuerySchema(Schema):
    registered_only = fields.Boolean(load_default=False)
    codes_only = fields.Boolean(load_default=False)


class AssignmentTableSchema(Schema):
    base = fields.String(allow_none=True)
    assignments = fields.Dict(
        keys=fields.String(), values=fields.String(allow_none=True), required=True
    )


class ProviderModuleSchema(Schema):
    id = fields.Integer(required=True)
    name = fields.String(required=True)
    display_name = fields.String(required=True)
    version = fields.String(required=True)
    active = fields.Boolean(required=True)
    supported_currencies = fields.List(fields.String(), required=True)


class ProviderLookupQuerySchema(Schema):
    to = fields.String(required=True)
    from_code = fields.String(data_key="from", load_default=None)
    just_one = fields.Boolean(load_default=False)


class ScanRequestSchema(Schema):
    base = fields.String(load_default=None)


class ProviderInstallResponseSchema(Schema):
    module = fields.Nested(ProviderModuleSchema, required=True)
    assignments = fields.Dict(
        keys=fields.String(), values=fields.String(allow_none=True), required=True
    )


class RateQuerySchema(Schema):
    base = fields.String(load_default=None)


class PairRateSchema(Schema):
    from_currency = fields.String(required=True)
    to_currency = fields.String(required=True)
    rate = fields.Float(required=True)
    source = fields.String(required=True)
    as_of = fields.String(required=True)


class RefreshOutcomeSchema(Schema):
    code = fields.String(required=True)
    status = fields.String(required=True)
    provider = fields.String(allow_none=True)
    rate = fields.Float(allow_none=True)
    error = fields.String(allow_none=True)


class RefreshResponseSchema(Schema):
    base = fields.String(required=True)
    results = fields.List(fields.Nested(RefreshOutcomeSchema), required=True)


class ErrorMessageSchema(Schema):
    message = fields.String(required=True)


def dump_module(module) -> dict:
    """Flatten a ModuleRef into the ProviderModuleSchema shape."""

    return {
        "id": module.id,
        "name": module.name,
        "display_name": module.display_name,
        "version": module.version,
        "active": module.active,
        "supported_currencies": sorted(module.supported_currencies()),
    }


def dump_assignment_table(table: dict) -> dict[str, str | None]:
    """Map currency codes to assigned module names."""

    return {code: module.name if module is not None else None for code, module in table.items()}
