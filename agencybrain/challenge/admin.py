"""Django admin configuration for Challenge models."""

from django.contrib import admin

from .models import (
    ChallengeAssignment,
    ChallengeLesson,
    ChallengeModule,
    ChallengeProduct,
    ChallengeProgress,
    ChallengeSundayModule,
    ChallengeSundayResponse,
    Core4Entry,
    StaffFlowSession,
)


@admin.register(ChallengeProduct)
class ChallengeProductAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "total_lessons", "duration_weeks", "is_active"]
    prepopulated_fields = {"slug": ("name",)}


@admin.register(ChallengeLesson)
class ChallengeLessonAdmin(admin.ModelAdmin):
    list_display = ["day_number", "title", "product", "week_number", "day_of_week", "is_discovery_flow"]
    list_filter = ["product", "week_number"]
    ordering = ["product", "day_number"]


@admin.register(ChallengeAssignment)
class ChallengeAssignmentAdmin(admin.ModelAdmin):
    list_display = ["staff_user", "product", "start_date", "status"]
    list_filter = ["status", "product"]


@admin.register(ChallengeProgress)
class ChallengeProgressAdmin(admin.ModelAdmin):
    list_display = ["assignment", "lesson", "status", "completed_at"]
    list_filter = ["status"]

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(ChallengeModule)
admin.site.register(ChallengeSundayModule)
admin.site.register(ChallengeSundayResponse)
admin.site.register(Core4Entry)


@admin.register(StaffFlowSession)
class StaffFlowSessionAdmin(admin.ModelAdmin):
    list_display = ["staff_user", "flow_slug", "status", "completed_at"]
    list_filter = ["flow_slug", "status"]
