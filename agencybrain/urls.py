"""
URL configuration for the AgencyBrain backend.
"""

from django.contrib import admin
from django.urls import include, path

from agencybrain.core import views as core_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", core_views.healthcheck, name="healthcheck"),
    path("api/", include("agencybrain.sales_experience.urls", namespace="sales_experience")),
    path("api/", include("agencybrain.challenge.urls", namespace="challenge")),
    path("api/", include("agencybrain.call_scoring.urls", namespace="call_scoring")),
]
