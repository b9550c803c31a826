"""Application-wide error types and handlers."""

from __future__ import annotations

from typing import Any

from flask import Flask, jsonify

from .providers.base import ProviderError, ProviderUnavailable


class APIError(Exception):
    """Base class for API-level errors."""

    status_code: int = 400
    default_message: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        payload: dict[str, Any] | None = None,
    ):
        message = message or self.default_message or ""
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}


class ValidationError(APIError):
    """Error raised for validation failures."""

    status_code = 422


class InvalidCodeError(ValidationError):
    """A currency code or identifier is malformed or unknown."""


class NoDefaultCurrencyError(APIError):
    """No default currency is configured, so no base can be derived."""

    status_code = 409
    default_message = "No default currency is configured."


class UnknownModuleError(APIError):
    """The referenced provider module is not installed or not implemented."""

    status_code = 404


class NoProviderAvailableError(APIError):
    """No installed provider can supply the requested rate."""

    status_code = 404


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    404: "Resource not found.",
    409: "Request conflicts with the current configuration.",
    422: "Submitted data is invalid.",
    502: "Upstream provider unavailable.",
}


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        message = error.message or DEFAULT_STATUS_MESSAGES.get(error.status_code, "Request failed.")
        payload = error.payload or {}

        response = {"message": message}
        if payload:
            response.update(payload)

        field_errors = _derive_field_errors(payload, default_message=message)
        if field_errors and "field_errors" not in response:
            response["field_errors"] = field_errors

        return jsonify(response), error.status_code

    @app.errorhandler(ProviderError)
    def handle_provider_error(error: ProviderError):
        response: dict[str, Any] = {
            "message": str(error) or DEFAULT_STATUS_MESSAGES[502],
            "error": "provider_unavailable",
        }
        provider = getattr(error, "provider", None)
        if provider:
            response["provider"] = provider
        if not isinstance(error, ProviderUnavailable):
            response["error"] = "provider_error"
        return jsonify(response), 502


def _derive_field_errors(
    payload: dict[str, Any],
    *,
    default_message: str | None = None,
) -> dict[str, list[str]]:
    """Translate payload fields into a flat field_errors mapping."""

    if not payload:
        return {}

    if isinstance(payload.get("field_errors"), dict):
        return {
            str(field): _normalize_messages(messages)
            for field, messages in payload["field_errors"].items()
            if _normalize_messages(messages)
        }

    field = payload.get("field")
    if field and default_message:
        return {str(field): [default_message]}

    return {}


def _normalize_messages(messages: Any) -> list[str]:
    if messages is None:
        return []
    if isinstance(messages, str):
        return [messages]
    if isinstance(messages, list):
        return [item if isinstance(item, str) else str(item) for item in messages if item is not None]
    return [str(messages)]
