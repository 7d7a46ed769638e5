"""
Initial schema for the 8-week Sales Experience program.
"""

import uuid

import django.db.models.deletion
from django.db import migrations, models


PROGRESS_STATUS_CHOICES = [
    ("locked", "Locked"),
    ("available", "Available"),
    ("in_progress", "In Progress"),
    ("completed", "Completed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="SalesExperienceAssignment",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_date", models.DateField()),
                ("timezone", models.CharField(default="America/New_York", max_length=64)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("active", "Active"), ("completed", "Completed")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                (
                    "agency",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sales_experience_assignments",
                        to="core.agency",
                    ),
                ),
            ],
            options={
                "db_table": "sales_experience_assignments",
                "indexes": [
                    models.Index(fields=["agency", "status"], name="se_assignment_agency_status"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalesExperienceModule",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("week_number", models.PositiveSmallIntegerField(unique=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "pillar",
                    models.CharField(
                        choices=[
                            ("sales_process", "Sales Process"),
                            ("accountability", "Accountability"),
                            ("coaching_cadence", "Coaching Cadence"),
                        ],
                        max_length=32,
                    ),
                ),
                ("icon", models.CharField(blank=True, max_length=64)),
                ("sort_order", models.IntegerField(default=0)),
            ],
            options={
                "db_table": "sales_experience_modules",
                "ordering": ["week_number"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("week_number__gte", 1), ("week_number__lte", 8)),
                        name="se_module_week_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalesExperienceLesson",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("day_of_week", models.PositiveSmallIntegerField()),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("video_url", models.URLField(blank=True)),
                ("video_platform", models.CharField(default="vimeo", max_length=32)),
                ("video_thumbnail_url", models.URLField(blank=True)),
                ("content_html", models.TextField(blank=True)),
                ("quiz_questions", models.JSONField(blank=True, default=list)),
                ("is_staff_visible", models.BooleanField(default=True)),
                ("is_discovery_flow", models.BooleanField(default=False)),
                ("sort_order", models.IntegerField(default=0)),
                (
                    "module",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lessons",
                        to="sales_experience.salesexperiencemodule",
                    ),
                ),
            ],
            options={
                "db_table": "sales_experience_lessons",
                "ordering": ["module__week_number", "day_of_week"],
                "constraints": [
                    models.UniqueConstraint(fields=("module", "day_of_week"), name="uniq_se_lesson_module_day"),
                    models.CheckConstraint(
                        condition=models.Q(("day_of_week__in", (1, 3, 5))),
                        name="se_lesson_day_mon_wed_fri",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StaffLessonProgress",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(choices=PROGRESS_STATUS_CHOICES, default="locked", max_length=16)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("video_watched_seconds", models.PositiveIntegerField(default=0)),
                ("video_completed", models.BooleanField(default=False)),
                ("unlocked_at", models.DateTimeField(blank=True, null=True)),
                ("quiz_score_percent", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("quiz_feedback_ai", models.TextField(blank=True)),
                ("quiz_completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="staff_progress",
                        to="sales_experience.salesexperienceassignment",
                    ),
                ),
                (
                    "lesson",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="staff_progress",
                        to="sales_experience.salesexperiencelesson",
                    ),
                ),
                (
                    "staff_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales_lesson_progress",
                        to="core.staffuser",
                    ),
                ),
            ],
            options={
                "db_table": "sales_experience_staff_progress",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("assignment", "staff_user", "lesson"),
                        name="uniq_se_staff_progress",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OwnerLessonProgress",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(choices=PROGRESS_STATUS_CHOICES, default="locked", max_length=16)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("video_watched_seconds", models.PositiveIntegerField(default=0)),
                ("video_completed", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="owner_progress",
                        to="sales_experience.salesexperienceassignment",
                    ),
                ),
                (
                    "lesson",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="owner_progress",
                        to="sales_experience.salesexperiencelesson",
                    ),
                ),
                (
                    "profile",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales_lesson_progress",
                        to="core.profile",
                    ),
                ),
            ],
            options={
                "db_table": "sales_experience_owner_progress",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("assignment", "profile", "lesson"),
                        name="uniq_se_owner_progress",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizAttempt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("attempt_number", models.PositiveIntegerField(default=1)),
                ("answers_json", models.JSONField(default=list)),
                ("score_percent", models.PositiveSmallIntegerField()),
                ("feedback_ai", models.TextField(blank=True)),
                ("started_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="quiz_attempts",
                        to="sales_experience.salesexperienceassignment",
                    ),
                ),
                (
                    "lesson",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="quiz_attempts",
                        to="sales_experience.salesexperiencelesson",
                    ),
                ),
                (
                    "staff_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales_quiz_attempts",
                        to="core.staffuser",
                    ),
                ),
            ],
            options={
                "db_table": "sales_experience_quiz_attempts",
                "ordering": ["attempt_number"],
            },
        ),
        migrations.CreateModel(
            name="EmailTemplate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("template_key", models.CharField(max_length=64, unique=True)),
                ("template_name", models.CharField(max_length=255)),
                ("subject_template", models.CharField(max_length=255)),
                ("body_template", models.TextField()),
                ("variables_available", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "sales_experience_email_templates",
            },
        ),
        migrations.CreateModel(
            name="EmailQueueItem",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("template_key", models.CharField(max_length=64)),
                ("recipient_email", models.EmailField(max_length=254)),
                ("recipient_name", models.CharField(blank=True, max_length=255)),
                (
                    "recipient_type",
                    models.CharField(
                        choices=[
                            ("staff", "Staff"),
                            ("owner", "Owner"),
                            ("key_employee", "Key Employee"),
                            ("manager", "Manager"),
                        ],
                        default="staff",
                        max_length=16,
                    ),
                ),
                ("scheduled_for", models.DateTimeField()),
                ("email_subject", models.CharField(max_length=255)),
                ("email_body_html", models.TextField(blank=True)),
                ("variables_json", models.JSONField(blank=True, default=dict)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("sent", "Sent"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("retry_count", models.PositiveSmallIntegerField(default=0)),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("resend_message_id", models.CharField(blank=True, max_length=255)),
                ("error_message", models.TextField(blank=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="email_queue",
                        to="sales_experience.salesexperienceassignment",
                    ),
                ),
                (
                    "lesson",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="queued_emails",
                        to="sales_experience.salesexperiencelesson",
                    ),
                ),
            ],
            options={
                "db_table": "sales_experience_email_queue",
                "indexes": [
                    models.Index(fields=["status", "scheduled_for"], name="se_email_queue_due"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("lesson__isnull", False)),
                        fields=("assignment", "lesson", "recipient_email", "template_key"),
                        name="uniq_se_email_per_lesson_recipient",
                    ),
                ],
            },
        ),
    ]
