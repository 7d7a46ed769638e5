"""
Call Scoring API Views.
"""

from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from pydantic import ValidationError

from agencybrain.core.exceptions import ServiceError
from agencybrain.core.http import (
    BadRequest,
    error_response,
    parse_json_body,
    service_error_response,
    validation_error_response,
)
from agencybrain.middleware.supabase_auth import get_auth_context, require_auth

from . import services
from .dto import QaRequestDTO


@csrf_exempt
@require_http_methods(["POST"])
@require_auth
def call_scoring_qa(request: HttpRequest) -> JsonResponse:
    """
    POST /api/call-scoring/qa/

    Body: {call_id, question}

    Owners and staff may ask; staff who are not managers only about their
    own calls.
    """
    try:
        body = parse_json_body(request)
        qa_request = QaRequestDTO.model_validate(body)
    except BadRequest as e:
        return error_response(code="invalid_json", message=str(e))
    except ValidationError as e:
        return validation_error_response(e)

    if not qa_request.call_id or not qa_request.question:
        return error_response(code="validation_error", message="Missing call_id or question")

    ctx = get_auth_context(request)
    try:
        result = services.answer_question(ctx, qa_request.call_id, qa_request.question)
    except ServiceError as e:
        return service_error_response(e)

    return JsonResponse(result.model_dump(mode="json"))
