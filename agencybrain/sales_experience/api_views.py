"""
Sales Experience API Views.

Views parse and authorize; services do the work. Responses are DTO dumps.
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods
from pydantic import ValidationError

from agencybrain.core.exceptions import ServiceError
from agencybrain.core.http import (
    BadRequest,
    error_response,
    parse_json_body,
    service_error_response,
    validation_error_response,
)
from agencybrain.middleware.supabase_auth import get_auth_context, require_owner, require_staff
from agencybrain.scheduling import InvalidDate

from .dto import LessonProgressRequestDTO, QuizSubmissionDTO
from .services import lessons_service, quiz_service

logger = logging.getLogger(__name__)


def _invalid_date_response(exc: InvalidDate) -> JsonResponse:
    logger.error("Assignment has an unusable start_date: %s", exc)
    return error_response(code="invalid_date", message=str(exc))


# =============================================================================
# LESSON LISTINGS
# =============================================================================


@require_GET
@require_staff
def get_staff_sales_lessons(request: HttpRequest) -> JsonResponse:
    """
    GET /api/staff/sales-lessons/

    Staff-visible lessons with time gating and this staff user's progress.
    """
    ctx = get_auth_context(request)
    try:
        dto = lessons_service.get_staff_overview(ctx.staff_user, ctx.agency_id)
    except InvalidDate as e:
        return _invalid_date_response(e)

    return JsonResponse(dto.model_dump(mode="json"))


@require_GET
@require_owner
def get_sales_experience(request: HttpRequest) -> JsonResponse:
    """
    GET /api/sales-experience/

    Owner view of the whole curriculum with the owner's own progress.
    """
    ctx = get_auth_context(request)
    try:
        dto = lessons_service.get_owner_overview(ctx.profile, ctx.agency_id)
    except InvalidDate as e:
        return _invalid_date_response(e)

    return JsonResponse(dto.model_dump(mode="json"))


# =============================================================================
# PROGRESS + QUIZ
# =============================================================================


@csrf_exempt
@require_http_methods(["POST"])
@require_staff
def update_lesson_progress(request: HttpRequest) -> JsonResponse:
    """
    POST /api/staff/sales-lessons/progress/

    Body: {lesson_id, action: "start" | "complete", video_watched_seconds?}
    """
    try:
        body = parse_json_body(request)
        progress_request = LessonProgressRequestDTO.model_validate(body)
    except BadRequest as e:
        return error_response(code="invalid_json", message=str(e))
    except ValidationError as e:
        return validation_error_response(e)

    ctx = get_auth_context(request)
    try:
        dto = lessons_service.record_staff_progress(ctx.staff_user, ctx.agency_id, progress_request)
    except ServiceError as e:
        return service_error_response(e)
    except InvalidDate as e:
        return _invalid_date_response(e)

    return JsonResponse(dto.model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["POST"])
@require_staff
def submit_sales_quiz(request: HttpRequest) -> JsonResponse:
    """
    POST /api/staff/sales-lessons/quiz/

    Body: {lesson_id, answers: [{question_id, answer}]}
    """
    try:
        body = parse_json_body(request)
        submission = QuizSubmissionDTO.model_validate(body)
    except BadRequest as e:
        return error_response(code="invalid_json", message=str(e))
    except ValidationError as e:
        return validation_error_response(e)

    ctx = get_auth_context(request)
    try:
        dto = quiz_service.submit_quiz(ctx.staff_user, ctx.agency_id, submission)
    except ServiceError as e:
        return service_error_response(e)
    except InvalidDate as e:
        return _invalid_date_response(e)

    return JsonResponse(dto.model_dump(mode="json"))
