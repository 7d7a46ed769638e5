"""
URL routes for the Challenge app. Mounted under /api/ by the root URLconf.
"""

from django.urls import path

from . import api_views

app_name = "challenge"

urlpatterns = [
    path(
        "staff/challenge/",
        api_views.get_staff_challenge,
        name="staff_challenge",
    ),
]
