"""Django admin configuration for Sales Experience models."""

from django.contrib import admin

from .models import (
    EmailQueueItem,
    EmailTemplate,
    QuizAttempt,
    SalesExperienceAssignment,
    SalesExperienceLesson,
    SalesExperienceModule,
    StaffLessonProgress,
)


@admin.register(SalesExperienceAssignment)
class SalesExperienceAssignmentAdmin(admin.ModelAdmin):
    list_display = ["agency", "status", "start_date", "end_date", "timezone"]
    list_filter = ["status"]
    search_fields = ["agency__name"]


class LessonInline(admin.TabularInline):
    model = SalesExperienceLesson
    fields = ["day_of_week", "title", "is_staff_visible", "is_discovery_flow"]
    extra = 0


@admin.register(SalesExperienceModule)
class SalesExperienceModuleAdmin(admin.ModelAdmin):
    list_display = ["week_number", "title", "pillar"]
    ordering = ["week_number"]
    inlines = [LessonInline]


@admin.register(StaffLessonProgress)
class StaffLessonProgressAdmin(admin.ModelAdmin):
    """Progress rows are never deleted."""

    list_display = ["staff_user", "lesson", "status", "quiz_score_percent", "completed_at"]
    list_filter = ["status"]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ["staff_user", "lesson", "attempt_number", "score_percent", "completed_at"]


@admin.register(EmailTemplate)
class EmailTemplateAdmin(admin.ModelAdmin):
    list_display = ["template_key", "template_name", "is_active"]


@admin.register(EmailQueueItem)
class EmailQueueItemAdmin(admin.ModelAdmin):
    list_display = ["template_key", "recipient_email", "status", "retry_count", "scheduled_for", "sent_at"]
    list_filter = ["status", "template_key"]
    ordering = ["-scheduled_for"]
