"""Django app configuration for call scoring."""

from django.apps import AppConfig


class CallScoringConfig(AppConfig):
    """Configuration for the call_scoring app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "agencybrain.call_scoring"
    label = "call_scoring"
    verbose_name = "Call Scoring"
