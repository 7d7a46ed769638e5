"""
URL routes for the Call Scoring app. Mounted under /api/ by the root URLconf.
"""

from django.urls import path

from . import api_views

app_name = "call_scoring"

urlpatterns = [
    path(
        "call-scoring/qa/",
        api_views.call_scoring_qa,
        name="call_scoring_qa",
    ),
]
