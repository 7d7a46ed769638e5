"""Django admin configuration for call scoring models."""

from django.contrib import admin

from .models import AgencyCall


@admin.register(AgencyCall)
class AgencyCallAdmin(admin.ModelAdmin):
    list_display = ["id", "agency", "team_member", "original_filename", "created_at"]
    list_filter = ["agency"]
    search_fields = ["original_filename", "transcript"]
