"""
Shared HTTP helpers for API views.

Every API error uses the same envelope:
{
    "error": {
        "code": "validation_error",
        "message": "Human-readable summary",
        "details": { ...optional extra fields... }
    }
}
"""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

from django.http import HttpRequest, JsonResponse
from pydantic import ValidationError

from .exceptions import ServiceError


class BadRequest(Exception):
    """Raised by request parsing helpers; views map it to a 400."""


def error_response(
    code: str,
    message: str,
    status: int = 400,
    details: dict[str, Any] | None = None,
) -> JsonResponse:
    """
    Create a standardized error response envelope.

    Args:
        code: Machine-readable error code (e.g., "validation_error", "lesson_locked")
        message: Human-readable error message
        status: HTTP status code (default 400)
        details: Optional dict with additional error context
    """
    envelope: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        envelope["error"]["details"] = details

    return JsonResponse(envelope, status=status)


def parse_json_body(request: HttpRequest) -> dict[str, Any]:
    """
    Parse the request body as a JSON object.

    An empty body parses to {}.

    Raises:
        BadRequest: if the body is not valid JSON or not an object
    """
    try:
        body = json.loads(request.body) if request.body else {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest("Invalid JSON body")

    if not isinstance(body, dict):
        raise BadRequest("Request body must be an object")

    return body


def parse_uuid(value: Any) -> UUID | None:
    """Parse a value to UUID, returning None on failure."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None


def service_error_response(exc: ServiceError) -> JsonResponse:
    """Map a service-layer exception to its error envelope."""
    return error_response(code=exc.code, message=str(exc), status=exc.status)


def validation_error_response(exc: ValidationError) -> JsonResponse:
    """Map a pydantic ValidationError to a 400 envelope listing the bad fields."""
    return error_response(
        code="validation_error",
        message="Request body failed validation",
        details={
            "errors": [
                {
                    "field": ".".join(str(loc) for loc in err["loc"]),
                    "message": err["msg"],
                }
                for err in exc.errors()
            ]
        },
    )
