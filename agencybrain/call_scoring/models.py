"""
Call scoring models.

An AgencyCall is an uploaded sales or service call. transcript_segments is
the timestamped transcript produced by the transcription step: a list of
{"start": seconds, "end": seconds, "text": str, "speaker": str | null}.
"""

import uuid

from django.db import models

from agencybrain.core.models import Agency, TeamMember, TimestampedModel


class AgencyCall(TimestampedModel):
    """A recorded call owned by an agency and, optionally, a team member."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    agency = models.ForeignKey(
        Agency,
        on_delete=models.CASCADE,
        related_name="calls",
    )
    team_member = models.ForeignKey(
        TeamMember,
        on_delete=models.SET_NULL,
        related_name="calls",
        null=True,
        blank=True,
    )
    original_filename = models.CharField(max_length=255, blank=True)
    call_duration_seconds = models.PositiveIntegerField(null=True, blank=True)
    transcript = models.TextField(blank=True)
    transcript_segments = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "agency_calls"
        indexes = [
            models.Index(fields=["agency", "team_member"], name="agency_call_member_idx"),
        ]

    def __str__(self):
        return self.original_filename or str(self.id)
