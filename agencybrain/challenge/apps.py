"""Django app configuration for the 6-Week Challenge."""

from django.apps import AppConfig


class ChallengeConfig(AppConfig):
    """Configuration for the challenge app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "agencybrain.challenge"
    label = "challenge"
    verbose_name = "6-Week Challenge"
