"""
Challenge API Views.
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from agencybrain.core.http import error_response
from agencybrain.middleware.supabase_auth import get_auth_context, require_staff
from agencybrain.scheduling import InvalidDate

from . import services

logger = logging.getLogger(__name__)


@require_GET
@require_staff
def get_staff_challenge(request: HttpRequest) -> JsonResponse:
    """
    GET /api/staff/challenge/

    The calling staff member's challenge dashboard. Returns
    {"has_assignment": false, "assignment": null, ...} when they are not
    enrolled.
    """
    ctx = get_auth_context(request)
    try:
        dto = services.get_staff_challenge(ctx.staff_user)
    except InvalidDate as e:
        logger.error("Challenge assignment has an unusable start_date: %s", e)
        return error_response(code="invalid_date", message=str(e))

    return JsonResponse(dto.model_dump(mode="json"))
