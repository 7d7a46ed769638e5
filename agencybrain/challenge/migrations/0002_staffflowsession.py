"""
Track guided flow sessions so discovery-flow lessons can report completion.
"""

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("core", "0001_initial"),
        ("challenge", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="StaffFlowSession",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("flow_slug", models.SlugField(max_length=64)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                            ("abandoned", "Abandoned"),
                        ],
                        default="in_progress",
                        max_length=16,
                    ),
                ),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "staff_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="flow_sessions",
                        to="core.staffuser",
                    ),
                ),
            ],
            options={
                "db_table": "staff_flow_sessions",
                "indexes": [
                    models.Index(fields=["staff_user", "flow_slug", "status"], name="flow_session_staff_slug"),
                ],
            },
        ),
    ]
