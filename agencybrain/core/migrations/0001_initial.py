"""
Initial schema for agencies, people and staff sessions.
"""

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Agency",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("timezone", models.CharField(default="America/New_York", max_length=64)),
            ],
            options={
                "db_table": "agencies",
                "verbose_name_plural": "Agencies",
            },
        ),
        migrations.CreateModel(
            name="AgencyFeatureAccess",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "feature_key",
                    models.CharField(
                        choices=[
                            ("call_scoring_qa", "Call Scoring Q&A"),
                            ("sales_experience", "8-Week Sales Experience"),
                            ("challenge", "6-Week Challenge"),
                        ],
                        max_length=64,
                    ),
                ),
                (
                    "agency",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feature_access",
                        to="core.agency",
                    ),
                ),
            ],
            options={
                "db_table": "agency_feature_access",
            },
        ),
        migrations.AddConstraint(
            model_name="agencyfeatureaccess",
            constraint=models.UniqueConstraint(fields=("agency", "feature_key"), name="uniq_agency_feature"),
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "supabase_uid",
                    models.CharField(help_text="Unique identifier from Supabase Auth", max_length=255, unique=True),
                ),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("full_name", models.CharField(blank=True, max_length=255)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("owner", "Agency Owner"),
                            ("key_employee", "Key Employee"),
                            ("manager", "Manager"),
                            ("admin", "Platform Admin"),
                        ],
                        default="owner",
                        max_length=32,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "agency",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="profiles",
                        to="core.agency",
                    ),
                ),
            ],
            options={
                "db_table": "profiles",
            },
        ),
        migrations.CreateModel(
            name="TeamMember",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("sales", "Sales"),
                            ("service", "Service"),
                            ("hybrid", "Hybrid"),
                            ("manager", "Manager"),
                        ],
                        default="sales",
                        max_length=32,
                    ),
                ),
                (
                    "agency",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="team_members",
                        to="core.agency",
                    ),
                ),
            ],
            options={
                "db_table": "team_members",
            },
        ),
        migrations.CreateModel(
            name="StaffUser",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("display_name", models.CharField(blank=True, max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "agency",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff_users",
                        to="core.agency",
                    ),
                ),
                (
                    "team_member",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="staff_users",
                        to="core.teammember",
                    ),
                ),
            ],
            options={
                "db_table": "staff_users",
            },
        ),
        migrations.CreateModel(
            name="StaffSession",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("session_token", models.CharField(max_length=255, unique=True)),
                ("is_valid", models.BooleanField(default=True)),
                ("expires_at", models.DateTimeField()),
                (
                    "staff_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sessions",
                        to="core.staffuser",
                    ),
                ),
            ],
            options={
                "db_table": "staff_sessions",
                "indexes": [
                    models.Index(fields=["session_token", "is_valid"], name="staff_session_token_valid_idx"),
                ],
            },
        ),
    ]
