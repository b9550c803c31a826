"""Routes for rate queries and the stored-rate refresh."""

from __future__ import annotations

from flask.views import MethodView

from fxregistry.schemas import (
    ErrorMessageSchema,
    PairRateSchema,
    RateQuerySchema,
    RefreshResponseSchema,
)
from fxregistry.services import directory, get_rate_query
from fxregistry.validation import validate_currency_code

from . import blp


@blp.route("/refresh")
class RatesRefresh(MethodView):
    @blp.response(200, RefreshResponseSchema())
    @blp.alt_response(409, schema=ErrorMessageSchema)
    def post(self):
        outcomes = get_rate_query().refresh_currency_rates()
        return {
            "base": directory.get_default_currency().code,
            "results": [
                {
                    "code": outcome.code,
                    "status": outcome.status.value,
                    "provider": outcome.provider,
                    "rate": outcome.rate,
                    "error": outcome.error,
                }
                for outcome in outcomes.values()
            ],
        }


@blp.route("/<string:code>")
class CurrencyRate(MethodView):
    @blp.arguments(RateQuerySchema, location="query")
    @blp.response(200, PairRateSchema())
    @blp.alt_response(404, schema=ErrorMessageSchema)
    @blp.alt_response(502, schema=ErrorMessageSchema)
    def get(self, args, code: str):
        target = validate_currency_code(code, field="code")
        base = args.get("base")
        if base:
            base = validate_currency_code(base, field="base")
        pair = get_rate_query().fetch_rate_for(target, base)
        return {
            "from_currency": pair.from_currency,
            "to_currency": pair.to_currency,
            "rate": pair.rate,
            "source": pair.source,
            "as_of": pair.timestamp.isoformat(),
        }
