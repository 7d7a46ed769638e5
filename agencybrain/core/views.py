"""
Views for the core app.
"""

from django.http import JsonResponse


def healthcheck(request):
    """
    Simple healthcheck endpoint.

    Returns 200 OK with status info. Exempt from authentication.
    """
    return JsonResponse({
        "status": "ok",
        "service": "agencybrain-backend",
    })
