"""
Initial schema for call scoring.
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
            name="AgencyCall",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("original_filename", models.CharField(blank=True, max_length=255)),
                ("call_duration_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("transcript", models.TextField(blank=True)),
                ("transcript_segments", models.JSONField(blank=True, null=True)),
                (
                    "agency",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="calls",
                        to="core.agency",
                    ),
                ),
                (
                    "team_member",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="calls",
                        to="core.teammember",
                    ),
                ),
            ],
            options={
                "db_table": "agency_calls",
                "indexes": [
                    models.Index(fields=["agency", "team_member"], name="agency_call_member_idx"),
                ],
            },
        ),
    ]
