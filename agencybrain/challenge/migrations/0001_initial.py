"""
Initial schema for the 6-Week Challenge.
"""

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ChallengeProduct",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("slug", models.SlugField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
                ("total_lessons", models.PositiveSmallIntegerField(default=30)),
                ("duration_weeks", models.PositiveSmallIntegerField(default=6)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "challenge_products",
            },
        ),
        migrations.CreateModel(
            name="ChallengeModule",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("week_number", models.PositiveSmallIntegerField()),
                ("description", models.TextField(blank=True)),
                ("icon", models.CharField(blank=True, max_length=64)),
                ("sort_order", models.IntegerField(default=0)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="modules",
                        to="challenge.challengeproduct",
                    ),
                ),
            ],
            options={
                "db_table": "challenge_modules",
                "ordering": ["week_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("product", "week_number"), name="uniq_challenge_module_week"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChallengeLesson",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("day_number", models.PositiveSmallIntegerField()),
                ("week_number", models.PositiveSmallIntegerField(editable=False)),
                ("day_of_week", models.PositiveSmallIntegerField(editable=False)),
                ("video_url", models.URLField(blank=True)),
                ("video_thumbnail_url", models.URLField(blank=True)),
                ("preview_text", models.TextField(blank=True)),
                ("content_html", models.TextField(blank=True)),
                ("questions", models.JSONField(blank=True, default=list)),
                ("action_items", models.JSONField(blank=True, default=list)),
                (
                    "is_discovery_flow",
                    models.BooleanField(
                        default=False,
                        help_text="Friday lesson completed by running a discovery flow",
                    ),
                ),
                (
                    "module",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="lessons",
                        to="challenge.challengemodule",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lessons",
                        to="challenge.challengeproduct",
                    ),
                ),
            ],
            options={
                "db_table": "challenge_lessons",
                "ordering": ["day_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("product", "day_number"), name="uniq_challenge_lesson_day"),
                    models.CheckConstraint(
                        condition=models.Q(("day_number__gte", 1)),
                        name="challenge_lesson_day_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChallengeSundayModule",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sunday_number", models.PositiveSmallIntegerField()),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("video_url", models.URLField(blank=True)),
                ("has_rating_section", models.BooleanField(default=False)),
                ("has_commitment_section", models.BooleanField(default=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sunday_modules",
                        to="challenge.challengeproduct",
                    ),
                ),
            ],
            options={
                "db_table": "challenge_sunday_modules",
                "ordering": ["sunday_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("product", "sunday_number"), name="uniq_challenge_sunday_module"),
                    models.CheckConstraint(
                        condition=models.Q(("sunday_number__gte", 0), ("sunday_number__lte", 6)),
                        name="challenge_sunday_number_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChallengeAssignment",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_date", models.DateField()),
                ("timezone", models.CharField(default="America/New_York", max_length=64)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("active", "Active"),
                            ("paused", "Paused"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments",
                        to="challenge.challengeproduct",
                    ),
                ),
                (
                    "staff_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="challenge_assignments",
                        to="core.staffuser",
                    ),
                ),
            ],
            options={
                "db_table": "challenge_assignments",
                "indexes": [
                    models.Index(fields=["staff_user", "status"], name="challenge_assign_staff_status"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChallengeProgress",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("locked", "Locked"),
                            ("available", "Available"),
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                        ],
                        default="locked",
                        max_length=16,
                    ),
                ),
                ("unlocked_at", models.DateTimeField(blank=True, null=True)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("video_watched_seconds", models.PositiveIntegerField(default=0)),
                ("video_completed", models.BooleanField(default=False)),
                ("reflection_response", models.JSONField(blank=True, default=dict)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="progress",
                        to="challenge.challengeassignment",
                    ),
                ),
                (
                    "lesson",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="progress",
                        to="challenge.challengelesson",
                    ),
                ),
            ],
            options={
                "db_table": "challenge_progress",
                "constraints": [
                    models.UniqueConstraint(fields=("assignment", "lesson"), name="uniq_challenge_progress"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChallengeSundayResponse",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sunday_number", models.PositiveSmallIntegerField()),
                ("rating_body", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("rating_being", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("rating_balance", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("rating_business", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("commitment_body", models.TextField(blank=True, null=True)),
                ("commitment_being", models.TextField(blank=True, null=True)),
                ("commitment_balance", models.TextField(blank=True, null=True)),
                ("commitment_business", models.TextField(blank=True, null=True)),
                ("final_reflection", models.TextField(blank=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sunday_responses",
                        to="challenge.challengeassignment",
                    ),
                ),
            ],
            options={
                "db_table": "challenge_sunday_responses",
                "ordering": ["sunday_number"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("assignment", "sunday_number"),
                        name="uniq_challenge_sunday_response",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Core4Entry",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField()),
                ("body_completed", models.BooleanField(default=False)),
                ("being_completed", models.BooleanField(default=False)),
                ("balance_completed", models.BooleanField(default=False)),
                ("business_completed", models.BooleanField(default=False)),
                (
                    "staff_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="core4_entries",
                        to="core.staffuser",
                    ),
                ),
            ],
            options={
                "db_table": "staff_core4_entries",
                "ordering": ["-date"],
                "constraints": [
                    models.UniqueConstraint(fields=("staff_user", "date"), name="uniq_core4_entry_per_day"),
                ],
            },
        ),
    ]
